import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "menu_service.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8001")),
        reload=os.environ.get("RELOAD", "true").lower() in {"1", "true", "yes"},
    )
