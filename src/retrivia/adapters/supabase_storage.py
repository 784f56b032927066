"""Supabase Storage adapter for frames and composites."""

from dataclasses import dataclass

from supabase import Client

from retrivia.services.persistence import ObjectStorage


@dataclass
class SupabaseObjectStorage(ObjectStorage):
    """Uploads to a public Supabase Storage bucket, overwriting existing objects."""

    client: Client

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """Store ``data`` at ``path`` and return its public URL."""
        self.client.storage.from_(bucket).upload(
            path=path,
            file=data,
            file_options={"content-type": content_type, "upsert": "true"},
        )
        return self.get_public_url(bucket, path)

    def get_public_url(self, bucket: str, path: str) -> str:
        """Return the public URL of a stored object."""
        return self.client.storage.from_(bucket).get_public_url(path).rstrip("?")
