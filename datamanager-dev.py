# Development server for the data manager using the in-memory storage backend
from datamanager_lib.config.config import StoreConfig
from datamanager_lib.main import create_app
app = create_app(StoreConfig(backend='memory'))
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
