"""Run the proxy with uvicorn: `python -m siska`."""
import uvicorn

from siska.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("siska.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
