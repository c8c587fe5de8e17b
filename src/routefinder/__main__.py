"""Start the API with uvicorn, honouring the ``PORT`` environment variable."""

import logging
import os

import uvicorn

logger = logging.getLogger(__name__)


def main() -> None:
    port = os.environ.get("PORT", "8000")
    try:
        port_int = int(port)
    except ValueError:
        logger.warning("Invalid PORT value '%s', using default 8000", port)
        port_int = 8000

    # Single worker; the TTL cache and resolver live in process memory.
    uvicorn.run(
        "routefinder.main:app",
        host="0.0.0.0",
        port=port_int,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()
