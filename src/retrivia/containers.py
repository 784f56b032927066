"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import ClientOptions, create_client

from retrivia.adapters.opencv_camera import OpenCvCamera
from retrivia.adapters.supabase_identity import SupabaseIdentityProvider
from retrivia.adapters.supabase_session_repository import SupabaseSessionRepository
from retrivia.adapters.supabase_storage import SupabaseObjectStorage
from retrivia.config import Settings
from retrivia.services.booth import BoothService
from retrivia.services.capture import CaptureService
from retrivia.services.gallery import GalleryService
from retrivia.services.persistence import OAuthIdentityProvider, SessionGateway
from retrivia.services.rendering import PreviewRenderer


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity: OAuthIdentityProvider
    booth_service: BoothService
    gallery_service: GalleryService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url,
        resolved_settings.supabase_anon_key,
        options=ClientOptions(flow_type="pkce"),
    )
    identity = SupabaseIdentityProvider(
        supabase_client, provider=resolved_settings.oauth_provider
    )
    repository = SupabaseSessionRepository(
        supabase_client, table_name=resolved_settings.sessions_table
    )
    gateway = SessionGateway(
        storage=SupabaseObjectStorage(supabase_client),
        repository=repository,
        identity=identity,
        bucket=resolved_settings.storage_bucket,
    )
    front_index, back_index = resolved_settings.resolved_camera_indices()
    camera = OpenCvCamera(front_index=front_index, back_index=back_index)
    booth_service = BoothService(
        capture=CaptureService(
            camera=camera, frame_quality=resolved_settings.frame_quality
        ),
        gateway=gateway,
        renderer=PreviewRenderer(),
        composite_scale=resolved_settings.composite_scale,
        composite_quality=resolved_settings.composite_quality,
        frame_quality=resolved_settings.frame_quality,
        timezone_name=resolved_settings.timezone,
    )
    gallery_service = GalleryService(
        repository=repository,
        timezone_name=resolved_settings.timezone,
        page_size=resolved_settings.gallery_page_size,
    )

    async def close_resources() -> None:
        camera.close()

    return AppContainer(
        settings=resolved_settings,
        identity=identity,
        booth_service=booth_service,
        gallery_service=gallery_service,
        close_resources=close_resources,
    )
