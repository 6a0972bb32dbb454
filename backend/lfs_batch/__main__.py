"""Local listener: python -m lfs_batch (or the lfs-batch console script)."""
import uvicorn

from lfs_batch.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "lfs_batch.main:app",
        host=settings.lfs_host,
        port=settings.lfs_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
