"""
Cooperative Mode Tests - batched, event-loop-friendly parse/serialize.

Both modes must give identical results; batching only changes when control
returns to the event loop.
"""

import asyncio
import logging

import pytest

from pttjs import PTTJSReader, PTTJSWriter, parse, parse_sync, serialize, serialize_sync
from pttjs.document import CellItem, Store


DOCUMENT = """|PTTJS 1.0|
|(@a|Alpha){
|H>Name|H>Age<|
|>Ann|>41<|
}|

|(@b|Beta){
|(2|1|@wide)>spans two<|
}|

>>>SCRIPT
(@a,0|1,1|1)=>number()
(1|1)=SUM(0|1,1:1|1)
(0|0)<=bold()
<<<SCRIPT
"""


def _big_document(pages: int, rows: int) -> str:
    lines = ["|PTTJS 1.0|"]
    for p in range(pages):
        lines.append(f"|(@p{p}|Page {p}){{")
        for r in range(rows):
            lines.append(f"|>r{r}|>{p}%7C{r}<|")
        lines.append("}|")
    return "\n".join(lines) + "\n"


class TestCooperativeParse:

    @pytest.mark.asyncio
    async def test_matches_direct(self):
        assert await parse(DOCUMENT) == parse_sync(DOCUMENT)

    @pytest.mark.asyncio
    async def test_small_batches_match_direct(self):
        assert await PTTJSReader.parse(DOCUMENT, batch_size=1) == parse_sync(DOCUMENT)

    @pytest.mark.asyncio
    async def test_implicit_page(self):
        store = await parse("|PTTJS 1.0|\n|>Hello<|\n")
        assert store.data["@page1"].rows == [[CellItem(index=0, value="Hello")]]

    @pytest.mark.asyncio
    async def test_large_document(self):
        text = _big_document(pages=3, rows=500)
        store = await PTTJSReader.parse(text, batch_size=64)
        assert list(store.data) == ["@p0", "@p1", "@p2"]
        assert len(store.data["@p2"].rows) == 500
        assert store.data["@p1"].rows[499][1].value == "1|499"
        assert store == parse_sync(text)

    @pytest.mark.asyncio
    async def test_page_order_is_source_order(self):
        # The first page takes many more batches than the second.
        lines = ["|(@big){"] + ["|>x<|"] * 200 + ["}|", "|(@small){", "|>y<|", "}|"]
        store = await PTTJSReader.parse("\n".join(lines), batch_size=5)
        assert list(store.data) == ["@big", "@small"]

    @pytest.mark.asyncio
    async def test_yields_to_event_loop(self):
        text = _big_document(pages=2, rows=300)
        ticks = 0
        done = False

        async def ticker():
            nonlocal ticks
            while not done:
                ticks += 1
                await asyncio.sleep(0)

        async def work():
            nonlocal done
            store = await PTTJSReader.parse(text, batch_size=10)
            done = True
            return store

        store, _ = await asyncio.gather(work(), ticker())
        assert len(store.data) == 2
        assert ticks > 1

    @pytest.mark.asyncio
    async def test_debug_summary_has_batch_size(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="pttjs.reader"):
            await PTTJSReader.parse(DOCUMENT, batch_size=7)
        [record] = [r for r in caplog.records if r.name == "pttjs.reader"]
        assert "batch_size=7" in record.getMessage()
        assert "@a" in record.getMessage()


class TestCooperativeSerialize:

    @pytest.mark.asyncio
    async def test_matches_direct(self):
        store = parse_sync(DOCUMENT)
        assert await serialize(store) == serialize_sync(store)
        assert await serialize(store, True, True) == serialize_sync(store, True, True)

    @pytest.mark.asyncio
    async def test_small_batches_match_direct(self):
        store = parse_sync(_big_document(pages=2, rows=50))
        text = await PTTJSWriter.serialize(store, show_index=True, batch_size=3)
        assert text == serialize_sync(store, show_index=True)

    @pytest.mark.asyncio
    async def test_empty_store(self):
        assert await serialize(Store()) == serialize_sync(Store()) == "|PTTJS 1.0|\n"

    @pytest.mark.asyncio
    async def test_round_trip(self):
        store = await parse(DOCUMENT)
        again = await parse(await serialize(store, show_index=True))
        assert again == store

    @pytest.mark.asyncio
    async def test_debug_summary_has_batch_size(self, caplog):
        store = parse_sync(DOCUMENT)
        with caplog.at_level(logging.DEBUG, logger="pttjs.writer"):
            await PTTJSWriter.serialize(store, batch_size=9)
        [record] = [r for r in caplog.records if r.name == "pttjs.writer"]
        assert "batch_size=9" in record.getMessage()
        assert "typings=1" in record.getMessage()
