# Load environment variables from .env file first, before any other imports
from dotenv import load_dotenv
load_dotenv()

import logging

from fastapi import FastAPI
from feed_engine.api.routes import feed, interactions, search
from feed_engine.config import EngineSettings

logging.basicConfig(
    level=EngineSettings.from_env().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Feed Composition & Interaction Engine", version="1.0.0")

app.include_router(feed.router, prefix="/feed", tags=["feed"])
app.include_router(interactions.router, prefix="/interactions", tags=["interactions"])
app.include_router(search.router, prefix="/search", tags=["search"])


@app.get("/health")
def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
