"""Unit test conftest: no external services required."""

from __future__ import annotations

import io

import pytest


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """Generate a 1-page PDF with 3 lines via fpdf2."""
    fpdf = pytest.importorskip("fpdf")
    pdf = fpdf.FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", size=12)
    pdf.cell(text="Line one of the PDF document.")
    pdf.ln()
    pdf.cell(text="Line two with additional content.")
    pdf.ln()
    pdf.cell(text="Line three concludes the page.")
    return bytes(pdf.output())


@pytest.fixture
def multi_page_pdf_bytes() -> bytes:
    """Generate a 3-page PDF for page order verification."""
    fpdf = pytest.importorskip("fpdf")
    pdf = fpdf.FPDF()
    pdf.set_font("Helvetica", size=12)
    for i in range(1, 4):
        pdf.add_page()
        pdf.cell(text=f"Content on page {i}.")
    return bytes(pdf.output())


@pytest.fixture
def empty_pdf_bytes() -> bytes:
    """Generate a 1-page PDF with no text layer (a 'scanned' page)."""
    fpdf = pytest.importorskip("fpdf")
    pdf = fpdf.FPDF()
    pdf.add_page()
    return bytes(pdf.output())


@pytest.fixture
def png_bytes() -> bytes:
    """A small white PNG."""
    image_mod = pytest.importorskip("PIL.Image")
    img = image_mod.new("RGB", (32, 16), "white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
