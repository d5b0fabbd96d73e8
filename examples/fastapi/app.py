"""Minimal FastAPI app built from amino pipelines.

Run with::

    uvicorn examples.fastapi.app:app --reload
"""

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request

from amino import EngineConfig, ok, pipeline
from amino.integrations import api_response, endpoint

load_dotenv()
logging.basicConfig(level=logging.INFO)

config = EngineConfig.from_env()
greeting = pipeline({"greeting": "hello"}, config=config).step(
    lambda name, ctx: ok({ctx["greeting"]: name or "world"})
)

app = FastAPI()


@app.get("/")
async def index():
    return await greeting.use_result(api_response)


@app.get("/greet/{name}")
async def greet(request: Request, name: str):
    return await (
        endpoint(request)
        .assert_(lambda v, ctx: name.isalpha(), "Name must be letters only")
        .step(lambda v, ctx: greeting.run(name))
        .response()
    )
