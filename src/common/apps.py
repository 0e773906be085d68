import structlog
from django.apps import AppConfig


class CommonConfig(AppConfig):
    """Configuration for the common app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "common"

    def ready(self) -> None:
        """Log the storage backend once Django is fully loaded."""
        from django.conf import settings

        logger = structlog.get_logger(__name__)
        logger.debug(
            "common_app_ready",
            storage_backend=settings.STORAGES["default"]["BACKEND"],
            payment_proof_dir=settings.PAYMENT_PROOF_UPLOAD_DIR,
        )
