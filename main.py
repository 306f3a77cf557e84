import uvicorn
from fastapi import FastAPI

from checkin.core.log import configure_logging
from checkin.api.checkins import router as checkins_router
from checkin.api.websocket import ws_router

configure_logging()

app = FastAPI(title="Voice Check-in")

app.include_router(ws_router)
app.include_router(checkins_router)


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        reload=False,
    )
