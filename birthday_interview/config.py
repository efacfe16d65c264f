"""Application settings."""

from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 8788
    debug: bool = False
    data_dir: Path = Path.home() / ".birthday-interview"
    store_backend: str = "json"  # "json" or "memory"
    video_dir_name: str = "interview-videos"
    balloon_video_dir_name: str = "balloon-videos"
    profile_photo_dir_name: str = "profile-photos"
    birthday_media_dir_name: str = "birthday-media"
    share_dir_name: str = "share-temp"
    backup_dir_name: str = "backups"
    max_upload_size_mb: int = 2048

    model_config = {"env_prefix": "BIRTHDAY_"}

    @property
    def store_dir(self) -> Path:
        return self.data_dir / "store"

    @property
    def video_dir(self) -> Path:
        return self.data_dir / self.video_dir_name

    @property
    def balloon_video_dir(self) -> Path:
        return self.data_dir / self.balloon_video_dir_name

    @property
    def profile_photo_dir(self) -> Path:
        return self.data_dir / self.profile_photo_dir_name

    @property
    def birthday_media_dir(self) -> Path:
        return self.data_dir / self.birthday_media_dir_name

    @property
    def share_dir(self) -> Path:
        return self.data_dir / self.share_dir_name

    @property
    def backup_dir(self) -> Path:
        return self.data_dir / self.backup_dir_name

    @property
    def staging_dir(self) -> Path:
        return self.data_dir / ".restore-staging"


settings = Settings()
