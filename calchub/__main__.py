"""Run the API with ``python -m calchub``."""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "calchub.main:app",
        host=os.getenv("API_HOST", "127.0.0.1"),
        port=int(os.getenv("API_PORT", "8000")),
        reload=os.getenv("API_RELOAD", "").lower() in {"1", "true", "yes"},
    )


if __name__ == "__main__":
    main()
