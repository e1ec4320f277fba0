"""Run the relay with ``python -m voice_relay``."""

import uvicorn

from voice_relay.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "voice_relay.main:app",
        host=settings.host,  # nosec B104 - intentional for containers
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":  # pragma: no cover
    main()
