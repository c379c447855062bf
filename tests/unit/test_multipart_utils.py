import pytest

from statics.api.errors import ParseError
from statics.api.multipart_utils import EofCursor, MultipartRequest, read_file_field

BOUNDARY = "---------------------------2132006148186267924133397521"
MULTIPART = {"Content-Type": f"multipart/form-data; boundary={BOUNDARY}"}


class TestEofCursor:
    def test_reads_in_chunks(self):
        cursor = EofCursor(b"12345")
        assert cursor.read(2) == b"12"
        assert cursor.read(2) == b"34"
        assert cursor.read(2) == b"5"
        assert cursor.retries == 2

    def test_read_all(self):
        cursor = EofCursor(b"12345")
        assert cursor.read() == b"12345"
        assert cursor.remaining == 0

    def test_empty_reads_then_eof(self):
        cursor = EofCursor(b"ab")
        assert cursor.read(10) == b"ab"
        assert cursor.read(10) == b""
        assert cursor.read(10) == b""
        with pytest.raises(EOFError):
            cursor.read(10)

    def test_empty_buffer_spends_budget_on_first_read(self):
        cursor = EofCursor(b"")
        assert cursor.read(10) == b""
        assert cursor.retries == 1

    def test_custom_budget(self):
        cursor = EofCursor(b"", retries=0)
        with pytest.raises(EOFError):
            cursor.read(1)


class TestResolveBoundary:
    def test_post_multipart(self):
        request = MultipartRequest("POST", MULTIPART, b"")
        assert request.resolve_boundary() == BOUNDARY

    def test_header_name_case_insensitive(self):
        request = MultipartRequest("post", {"content-type": "multipart/form-data; boundary=abc"}, b"")
        assert request.resolve_boundary() == "abc"

    def test_quoted_boundary(self):
        request = MultipartRequest("POST", {"Content-Type": 'multipart/form-data; boundary="abc.def"'}, b"")
        assert request.resolve_boundary() == "abc.def"

    @pytest.mark.parametrize("method,headers", [
        ("GET", MULTIPART),
        ("PUT", MULTIPART),
        ("POST", {}),
        ("POST", {"Content-Type": "application/json"}),
        ("POST", {"Content-Type": "multipart/mixed; boundary=abc"}),
        ("POST", {"Content-Type": "multipart/form-data"}),
    ])
    def test_no_boundary(self, method, headers):
        assert MultipartRequest(method, headers, b"").resolve_boundary() is None


class TestReadFileField:
    def test_reads_first_entry(self, multipart_body):
        data = bytes(range(256)) * 10
        request = MultipartRequest("POST", MULTIPART, multipart_body(data))

        part = read_file_field(request)

        assert part.data == data
        assert part.content_type == "image/png"
        assert part.subtype == "png"
        assert part.field_name == "file"
        assert part.filename == "image-328x228.png"

    def test_small_chunks(self, multipart_body):
        data = b"\x89PNG" + bytes(range(256)) * 3
        request = MultipartRequest("POST", MULTIPART, multipart_body(data))
        assert read_file_field(request, chunk_size=7).data == data

    def test_ignores_following_entries(self, multipart_body):
        first = multipart_body(b"first", content_type="image/jpeg")
        body = first.replace(f"--{BOUNDARY}--".encode(), f"--{BOUNDARY}".encode())
        body += b'Content-Disposition: form-data; name="other"\r\n\r\nsecond\r\n'
        body += f"--{BOUNDARY}--\r\n".encode()

        part = read_file_field(MultipartRequest("POST", MULTIPART, body))

        assert part.data == b"first"
        assert part.subtype == "jpeg"

    def test_missing_boundary(self, multipart_body):
        request = MultipartRequest("POST", {"Content-Type": "image/png"}, multipart_body(b"x"))
        with pytest.raises(ParseError):
            read_file_field(request)

    def test_wrong_boundary(self, multipart_body):
        headers = {"Content-Type": "multipart/form-data; boundary=abeceda"}
        with pytest.raises(ParseError):
            read_file_field(MultipartRequest("POST", headers, multipart_body(b"data")))

    def test_missing_content_type(self, multipart_body):
        request = MultipartRequest("POST", MULTIPART, multipart_body(b"data", content_type=None))
        with pytest.raises(ParseError, match="content-type"):
            read_file_field(request)

    def test_truncated_body(self, multipart_body):
        body = multipart_body(b"x" * 100)
        truncated = body[:body.index(b"\r\n\r\n") + 4 + 50]
        with pytest.raises(ParseError):
            read_file_field(MultipartRequest("POST", MULTIPART, truncated))

    def test_empty_body(self):
        with pytest.raises(ParseError):
            read_file_field(MultipartRequest("POST", MULTIPART, b""))

    def test_get_request(self, multipart_body):
        with pytest.raises(ParseError):
            read_file_field(MultipartRequest("GET", MULTIPART, multipart_body(b"data")))
