"""Tests for bitmap decoding, encoding and pixel addressing."""

from __future__ import annotations

import math
from io import BytesIO

import pytest
from PIL import Image

from conftest import RIBBON_PALETTE
from ribbonprint.exceptions import FormatError, PixelOutOfRange
from ribbonprint.services import BitmapService
from ribbonprint.utils.bitmap import pack_row, pixel_at, row_stride


BLACK_WHITE = [(0, 0, 0), (255, 255, 255)]


class TestRowStride:
    """Test suite for row stride calculation."""

    @pytest.mark.parametrize("bpp", [1, 2, 4])
    def test_row_stride_is_padded_to_four_bytes(self, bpp):
        """Test that every stride is 4-byte aligned and holds the whole row."""
        for width in range(1, 100):
            stride = row_stride(bpp, width)
            assert stride % 4 == 0
            assert stride >= math.ceil(bpp * width / 8)
            assert stride - math.ceil(bpp * width / 8) < 4

    def test_known_values(self):
        """Test strides for a few hand-computed sizes."""
        assert row_stride(1, 1) == 4
        assert row_stride(1, 33) == 8
        assert row_stride(4, 8) == 4
        assert row_stride(4, 9) == 8
        assert row_stride(2, 16) == 4


class TestPixelAddressing:
    """Test suite for bit-packed pixel lookup and packing."""

    def test_one_bit_pixels_are_msb_first(self):
        """Test that the leftmost pixel is the top bit of the byte."""
        buffer = bytes([0b10110000, 0, 0, 0])
        assert [pixel_at(buffer, 4, 1, x, 0) for x in range(5)] == [1, 0, 1, 1, 0]

    def test_four_bit_pixels(self):
        """Test nibble lookup, high nibble first."""
        buffer = bytes([0x12, 0x34, 0x00, 0x00])
        assert [pixel_at(buffer, 4, 4, x, 0) for x in range(4)] == [1, 2, 3, 4]

    def test_three_bit_pixels_straddle_bytes(self):
        """Test fields crossing a byte boundary when bpp does not divide 8."""
        buffer = pack_row([5, 3, 6, 1], 3)
        assert buffer == bytes([0b10101111, 0b00010000, 0, 0])
        assert [pixel_at(buffer, 4, 3, x, 0) for x in range(4)] == [5, 3, 6, 1]

    def test_pixel_uses_physical_row(self):
        """Test that the row index selects the stored row."""
        buffer = bytes([0x00, 0, 0, 0, 0xF0, 0, 0, 0])
        assert pixel_at(buffer, 4, 4, 0, 0) == 0
        assert pixel_at(buffer, 4, 4, 0, 1) == 0xF

    def test_pack_row_rejects_wide_index(self):
        """Test that an index too large for the depth is refused."""
        with pytest.raises(ValueError):
            pack_row([2], 1)


class TestDecode:
    """Test suite for BMP decoding."""

    @pytest.mark.parametrize("bpp", [1, 2, 4])
    @pytest.mark.parametrize("position", [(0, 0), (12, 6), (12, 0), (0, 6), (5, 3)])
    def test_known_pixel_round_trip(self, make_bmp, bpp, position):
        """Test that a pixel written at (x, y) decodes at (x, y)."""
        width, height = 13, 7
        value = (1 << bpp) - 1
        pixels = [[0] * width for _ in range(height)]
        x, y = position
        pixels[y][x] = value
        palette = (RIBBON_PALETTE * 2)[: 1 << bpp]

        image = BitmapService.load(make_bmp(pixels, palette, bpp))

        assert (image.width, image.height, image.bpp) == (width, height, bpp)
        assert image.get_pixel(x, y) == value
        assert sum(image.get_pixel(i, j) for i in range(width) for j in range(height)) == value

    def test_rows_are_stored_bottom_up(self, make_bmp):
        """Test that the first stored row is the visual bottom row."""
        stored = bytes([0x00, 0, 0, 0]) + bytes([0x80, 0, 0, 0])
        image = BitmapService.load(make_bmp([[0], [0]], BLACK_WHITE, 1, data=stored))

        assert image.get_pixel(0, 0) == 1
        assert image.get_pixel(0, 1) == 0

    def test_palette_is_read_as_bgr(self, make_bmp):
        """Test that palette entries are converted to RGB order."""
        image = BitmapService.load(make_bmp([[0, 1]], [(0xB8, 0x00, 0x00), (0x00, 0x5B, 0xFF)], 1))
        assert image.palette == ((0xB8, 0x00, 0x00), (0x00, 0x5B, 0xFF))

    def test_color_count_derived_from_depth(self, make_bmp):
        """Test that a zero color count means 2^bpp entries."""
        palette = RIBBON_PALETTE[:4]
        image = BitmapService.load(make_bmp([[0, 1, 2, 3]], palette, 2, n_colors=0))
        assert image.n_colors == 4
        assert image.palette == tuple(palette)

    def test_short_dib_header_defaults_to_zero(self, make_bmp):
        """Test that fields past the declared header size read as zero."""
        palette = RIBBON_PALETTE[:2]
        image = BitmapService.load(make_bmp([[1, 0, 1]], palette, 1, dib_size=16))
        assert image.n_colors == 2
        assert [image.get_pixel(x, 0) for x in range(3)] == [1, 0, 1]

    def test_bad_signature(self, make_bmp):
        """Test that a missing BM signature is rejected."""
        with pytest.raises(FormatError, match="signature"):
            BitmapService.load(make_bmp([[0]], signature=b"XX"))

    def test_zero_dib_size(self, make_bmp):
        """Test that a zero DIB header size is rejected."""
        with pytest.raises(FormatError, match="DIB size"):
            BitmapService.load(make_bmp([[0]], dib_size=0))

    def test_compression_rejected(self, make_bmp):
        """Test that compressed bitmaps are rejected."""
        with pytest.raises(FormatError, match="compression"):
            BitmapService.load(make_bmp([[0]], compression=2))

    def test_deep_bitmap_rejected(self, make_bmp):
        """Test that more than 4 bits per pixel is rejected."""
        with pytest.raises(FormatError, match="bits-per-pixel"):
            BitmapService.load(make_bmp([[0]], bpp=8))

    def test_top_down_bitmap_rejected(self, make_bmp):
        """Test that a negative height is rejected."""
        with pytest.raises(FormatError, match="Top-down"):
            BitmapService.load(make_bmp([[0]], height=-1))

    def test_truncated_pixel_data(self, make_bmp):
        """Test that a short pixel data read is fatal."""
        with pytest.raises(FormatError, match="pixel data"):
            BitmapService.load(make_bmp([[0, 1], [1, 0]], truncate=1))

    def test_truncated_palette(self, make_bmp):
        """Test that a palette running past the end of file is fatal."""
        blob = make_bmp([[0]], n_colors=16)
        with pytest.raises(FormatError):
            BitmapService.load(blob[:14 + 40 + 8])

    def test_empty_file(self):
        """Test that an empty source is rejected."""
        with pytest.raises(FormatError, match="file header"):
            BitmapService.load(b"")

    def test_pixel_out_of_range(self, make_bmp):
        """Test that lookups outside the image are refused."""
        image = BitmapService.load(make_bmp([[0, 0], [0, 0]]))
        with pytest.raises(PixelOutOfRange):
            image.get_pixel(2, 0)
        with pytest.raises(PixelOutOfRange):
            image.get_pixel(0, 2)
        with pytest.raises(PixelOutOfRange):
            image.get_pixel(-1, 0)

    def test_decodes_pillow_monochrome_bitmap(self):
        """Test decoding a 1 bpp file written by Pillow."""
        img = Image.new("1", (10, 3), 1)
        img.putpixel((2, 1), 0)
        buffer = BytesIO()
        img.save(buffer, format="BMP")

        image = BitmapService.decode(buffer)

        assert image.bpp == 1
        assert image.palette == ((0, 0, 0), (255, 255, 255))
        assert image.get_pixel(2, 1) == 0
        assert image.get_pixel(0, 0) == 1
        assert image.get_pixel(9, 2) == 1

    def test_pillow_eight_bit_palette_rejected(self):
        """Test that Pillow's 8 bpp palette output is refused."""
        img = Image.new("P", (4, 4), 0)
        img.putpalette([0, 0, 0, 255, 255, 255])
        buffer = BytesIO()
        img.save(buffer, format="BMP")

        with pytest.raises(FormatError, match="bits-per-pixel"):
            BitmapService.decode(buffer)


class TestEncode:
    """Test suite for bitmap encoding and the test pattern."""

    def test_test_pattern_layout(self):
        """Test the diagonal color ramp of the test pattern."""
        img = BitmapService.create_test_pattern()
        assert img.size == (8, 8)
        assert img.getpixel((0, 0)) == 0
        assert img.getpixel((2, 0)) == 1
        assert img.getpixel((0, 2)) == 1
        assert img.getpixel((7, 7)) == 6

    def test_test_pattern_cell_size(self):
        """Test that squares scale with the cell size."""
        img = BitmapService.create_test_pattern(3)
        assert img.size == (24, 24)
        assert img.getpixel((5, 5)) == 0
        assert img.getpixel((6, 0)) == 1
        assert img.getpixel((23, 23)) == 6

    def test_test_pattern_rejects_bad_cell(self):
        with pytest.raises(ValueError):
            BitmapService.create_test_pattern(0)

    def test_encoded_bitmap_opens_in_pillow(self):
        """Test that encoded bitmaps are valid 4 bpp BMP files."""
        image = BitmapService.from_pil(BitmapService.create_test_pattern(2))
        img = Image.open(BytesIO(BitmapService.encode_bitmap(image)))

        assert img.size == (16, 16)
        assert img.mode == "P"
        for y in range(16):
            for x in range(16):
                assert img.getpixel((x, y)) == x // 4 + y // 4

    def test_encode_then_decode_preserves_image(self):
        """Test that decoding an encoded bitmap yields the same bitmap."""
        image = BitmapService.from_pil(BitmapService.create_test_pattern())
        assert BitmapService.load(BitmapService.encode_bitmap(image)) == image

    def test_from_pil_requires_palette_image(self):
        """Test that non-palette images are refused."""
        with pytest.raises(FormatError, match="palette image"):
            BitmapService.from_pil(Image.new("RGB", (4, 4)))

    def test_from_pil_rejects_many_colors(self):
        """Test that more than 16 palette entries in use are refused."""
        img = Image.new("P", (20, 1))
        img.putpalette([value for i in range(20) for value in (i, i, i)])
        for x in range(20):
            img.putpixel((x, 0), x)
        with pytest.raises(FormatError, match="Too many colors"):
            BitmapService.from_pil(img)
