"""Tests for the Result container and the trycatch adapter."""

from __future__ import annotations

import asyncio
import json

import pytest

from amino import Err, Ok, StepError, err, ok, trycatch


@pytest.mark.unit
class TestResult:
    def test_ok_carries_value(self):
        result = ok(5)

        assert result == Ok(5)
        assert result.is_ok and not result.is_err
        assert result.unwrap() == 5

    def test_err_from_message(self):
        result = err("Division by zero")

        assert result.is_err and not result.is_ok
        assert isinstance(result.error, StepError)
        assert str(result.error) == "Division by zero"

    def test_err_keeps_exception(self):
        error = KeyError("k")
        assert err(error).error is error

    def test_err_rejects_other_types(self):
        with pytest.raises(TypeError):
            err(42)

    def test_err_unwrap_raises(self):
        with pytest.raises(StepError, match="nope"):
            err("nope").unwrap()

    def test_results_are_frozen(self):
        with pytest.raises(AttributeError):
            ok(1).value = 2

    def test_divide_example(self):
        def divide(a, b):
            if b == 0:
                return err("Division by zero")
            return ok(a / b)

        assert divide(10, 2) == Ok(5.0)
        assert isinstance(divide(10, 0), Err)


@pytest.mark.unit
class TestTryCatch:
    def test_sync_success(self):
        result = trycatch(lambda: json.loads('{"name": "John"}'))
        assert result == Ok({"name": "John"})

    def test_sync_failure(self):
        result = trycatch(lambda: json.loads("not json"))

        assert isinstance(result, Err)
        assert isinstance(result.error, json.JSONDecodeError)

    @pytest.mark.asyncio
    async def test_async_success(self):
        async def fetch():
            await asyncio.sleep(0)
            return {"data": "test"}

        assert await trycatch(fetch) == Ok({"data": "test"})

    @pytest.mark.asyncio
    async def test_async_failure(self):
        async def fetch():
            raise ConnectionError("offline")

        result = await trycatch(fetch)
        assert isinstance(result.error, ConnectionError)

    def test_base_exceptions_propagate(self):
        def interrupt():
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            trycatch(interrupt)

    @pytest.mark.asyncio
    async def test_usable_inside_a_step(self):
        from amino import pipeline

        pipe = pipeline().step(lambda raw, ctx: trycatch(lambda: int(raw)))

        assert await pipe.run("12") == Ok(12)
        assert isinstance((await pipe.run("x")).error, ValueError)
