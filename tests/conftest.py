"""
Pytest configuration and shared fixtures.

Generators and extractors are replaced with in-memory fakes so no test
touches the network.
"""
import pytest

from tests.fakes import cards_json


@pytest.fixture
def sample_reply():
    return "Sure! Here are your cards:\n```json\n" + cards_json(6) + "\n```"


@pytest.fixture
def pdf_bytes():
    """A small real PDF built with PyMuPDF."""
    import fitz

    doc = fitz.open()
    for text in (
        "Photosynthesis converts light into chemical energy.",
        "Chlorophyll absorbs red and blue light.",
    ):
        page = doc.new_page()
        page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data
