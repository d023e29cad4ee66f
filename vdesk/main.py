import uvicorn

from vdesk.configs.setup import create_app
from vdesk.configs.settings import settings

app = create_app()


def run() -> None:
    uvicorn.run(
        "vdesk.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.APP_ENV == "dev",
    )


if __name__ == "__main__":
    run()
