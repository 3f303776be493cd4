"""
Purpose:
- Sanity-check critical library versions after upgrades.
- Import the exact modules the caption service uses and print versions so we can spot drift immediately.
"""

import sys
import fastapi
import uvicorn
import pydantic
import httpx
import openai
import PIL
import structlog
from pydantic_settings import BaseSettings

from caption_api.captions.postprocess import PostProcessConfig, process

print("python", sys.version)
print("fastapi", fastapi.__version__)
print("uvicorn", uvicorn.__version__)
print("pydantic", pydantic.__version__)
print("pydantic-settings", BaseSettings.__module__.split(".")[0])  # presence check
print("httpx", httpx.__version__)
print("openai", openai.__version__)
print("pillow", PIL.__version__)
print("structlog", structlog.__version__)
# pipeline smoke check
out = process("This image shows a cat.", PostProcessConfig(prefix="TOK", negative_filters=("this image shows",)))
print("pipeline", repr(out))
print("OK")
