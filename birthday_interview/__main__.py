"""Entry point: python -m birthday_interview"""

import uvicorn
from .config import settings


def main():
    uvicorn.run(
        "birthday_interview.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
