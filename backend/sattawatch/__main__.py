"""Run the API with uvicorn: python -m sattawatch"""

import uvicorn

from sattawatch.config import settings


if __name__ == "__main__":
    uvicorn.run("sattawatch.main:app", host="0.0.0.0", port=settings.PORT)
