"""
FastAPI web application for Mood Radio
Provides REST API endpoints for mood radio generation, mood statistics and discovery.
"""

import logging
from contextlib import asynccontextmanager
from pydantic import BaseModel
from config.settings import Settings, configure_logging
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from typing import Optional, List
from fastapi.middleware.cors import CORSMiddleware

from moodradio.api.mongo_catalog import MongoTrackCatalog
from moodradio.errors import CatalogError, MoodRadioError
from moodradio.models.mood import list_moods
from moodradio.models.playlist import PlaylistResponse
from moodradio.services.mood_playlist_generator import MoodPlaylistGenerator
from moodradio.utils.cache_manager import CacheManager

logger = logging.getLogger(__name__)

# Initialize settings
settings = Settings()
configure_logging(settings)

@asynccontextmanager
async def lifespan(app: FastAPI):
    cache_manager = CacheManager(settings.cache.redis_url)
    await cache_manager.connect()

    catalog = None
    if settings.database.mongo_url:
        catalog = MongoTrackCatalog(
            mongo_url=settings.database.mongo_url,
            db_name=settings.database.db_name,
            collection_name=settings.database.tracks_collection
        )
        await catalog.connect()
        app.state.generator = MoodPlaylistGenerator(catalog, settings, cache_manager=cache_manager)
    else:
        logger.warning("MONGO_URL is not configured, radio endpoints are unavailable")

    yield

    if catalog is not None:
        await catalog.close()
    await cache_manager.close()

app = FastAPI(
    title="Mood Radio API",
    description="Generate mood radio playlists from the track catalog",
    version="1.0.0",
    lifespan=lifespan
)
app.state.generator = None

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

class RecommendationRequest(BaseModel):
    liked_track_ids: Optional[List[str]] = None

def get_generator(request: Request) -> MoodPlaylistGenerator:
    generator = request.app.state.generator
    if generator is None:
        raise CatalogError("Track catalog is not configured")
    return generator

@app.exception_handler(MoodRadioError)
async def mood_radio_error_handler(request: Request, exc: MoodRadioError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.get("/")
async def root():
    return {"message": "Mood Radio API", "version": "1.0.0"}

@app.get("/health")
async def health_check():
    return {"status": "healthy", "services": ["mood_radio"]}

@app.get("/api/moods")
async def get_moods():
    """Get all mood categories."""
    return {"success": True, "data": {"moods": [mood.to_dict() for mood in list_moods()]}}

@app.get("/api/moods/{mood}/radio")
async def get_mood_radio(
    mood: str,
    limit: Optional[str] = None,
    shuffle: Optional[str] = None,
    generator: MoodPlaylistGenerator = Depends(get_generator)
):
    """Generate a radio playlist for a mood."""
    try:
        playlist = await generator.generate(mood, limit=limit, shuffle=shuffle)
        return {"success": True, "data": {"playlist": PlaylistResponse.from_playlist(playlist).model_dump()}}
    except MoodRadioError:
        raise
    except Exception as e:
        logger.exception(f"Radio generation failed for {mood}")
        raise HTTPException(status_code=500, detail=str(e))

@app.get("/api/moods/{mood}/stats")
async def get_mood_stats(mood: str, generator: MoodPlaylistGenerator = Depends(get_generator)):
    """Track count, top tracks and genre distribution for a mood."""
    try:
        return {"success": True, "data": await generator.mood_stats(mood)}
    except MoodRadioError:
        raise
    except Exception as e:
        logger.exception(f"Mood stats failed for {mood}")
        raise HTTPException(status_code=500, detail=str(e))

@app.get("/api/moods/{mood}/discover")
async def discover_mood(
    mood: str,
    limit: Optional[str] = None,
    generator: MoodPlaylistGenerator = Depends(get_generator)
):
    """Lesser-known tracks in a mood."""
    try:
        return {"success": True, "data": await generator.discover(mood, limit=limit)}
    except MoodRadioError:
        raise
    except Exception as e:
        logger.exception(f"Discovery failed for {mood}")
        raise HTTPException(status_code=500, detail=str(e))

@app.post("/api/moods/recommendations")
async def recommend_moods(
    request: RecommendationRequest,
    generator: MoodPlaylistGenerator = Depends(get_generator)
):
    """Recommend moods from the tracks a listener liked."""
    liked_tracks = None
    if request.liked_track_ids:
        liked_tracks = await generator.catalog.find_by_ids(request.liked_track_ids)

    return {
        "success": True,
        "data": {"recommendations": generator.recommend_moods(liked_tracks)}
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.app_host, port=settings.app_port)
