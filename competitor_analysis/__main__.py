import uvicorn

from competitor_analysis.config.settings import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run(
        "competitor_analysis.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
