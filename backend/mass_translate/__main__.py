import uvicorn

from mass_translate.config.settings import settings


def main():
    uvicorn.run(
        "mass_translate.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
