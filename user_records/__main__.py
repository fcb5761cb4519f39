"""Run the API with uvicorn: ``python -m user_records``."""

import uvicorn

from user_records.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("user_records.main:app", host="0.0.0.0", port=settings.port)  # noqa: S104


if __name__ == "__main__":
    main()
