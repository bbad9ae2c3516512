#!/usr/bin/env python
import sys
import os

# Agregar el directorio actual al path
sys.path.insert(0, os.path.dirname(__file__))

import uvicorn

from app.config import HOST, PORT
from app.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT, log_level="info")
