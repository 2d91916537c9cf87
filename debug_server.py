#!/usr/bin/env python3
"""
Development server with auto-reload and debug logging.
Set breakpoints in your editor and attach to this process.
"""
import sys
import os
from pathlib import Path

project_dir = Path(__file__).parent
sys.path.insert(0, str(project_dir))
os.chdir(project_dir)

if __name__ == "__main__":
    import uvicorn
    from rentclub.core.config import settings

    # Import string format so reload works
    uvicorn.run(
        "rentclub.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="debug",
    )
