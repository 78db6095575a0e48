from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pathlib import Path
import json
import os

# Support both local development and Docker
DEFAULT_DATA_DIR = Path("/data") if os.path.exists("/data") else Path(__file__).resolve().parents[2] / "data"


def create_mock_app(data_dir: Path = DEFAULT_DATA_DIR) -> FastAPI:
    app = FastAPI(title="Mock Data Server", version="1.0.0")

    @app.get("/health")
    def health(): return {"status": "ok"}

    @app.get("/data/{collection}")
    def get_collection(collection: str):
        file = Path(data_dir) / f"{collection}.json"
        if not file.exists():
            raise HTTPException(status_code=404, detail="collection not found")
        return JSONResponse(content=json.loads(file.read_text()))

    return app


app = create_mock_app()
