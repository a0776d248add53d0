import uvicorn

from ipgeo.config import load_settings


def main() -> None:
    """Run the FastAPI application with uvicorn."""
    settings = load_settings()
    uvicorn.run(
        "ipgeo.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )


if __name__ == "__main__":
    main()
