import base64
import os

import pytest

from docexport.docs.buffer import OffscreenSurface, decode_data_uri
from docexport.docs.model import BulletList, DocumentTree, Image, ListItem
from docexport.render.style import VisualSurface


def _surface(*srcs):
    images = tuple(Image(src=s) for s in srcs)
    nested = BulletList(items=(ListItem(blocks=images),))
    return VisualSurface(tree=DocumentTree(blocks=(nested,)))


def test_decode_data_uri():
    uri = "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()
    assert decode_data_uri(uri) == ("image/png", b"\x89PNG")
    assert decode_data_uri("data:text/plain,hello") is None
    assert decode_data_uri("images/cat.png") is None


def test_offscreen_surface_materializes_and_removes_buffer(tmp_path):
    uri = "data:image/png;base64," + base64.b64encode(b"pixels").decode()
    local = tmp_path / "local.png"
    local.write_bytes(b"x")
    with OffscreenSurface(_surface(uri, str(local), "https://example.com/a.png"), base_dir=str(tmp_path)) as clone:
        buffer_dir = clone.base_dir
        written = clone.image_path(uri)
        assert written.startswith(buffer_dir)
        assert written.endswith(".png")
        with open(written, "rb") as f:
            assert f.read() == b"pixels"
        assert clone.image_path(str(local)) == str(local)
        assert clone.image_path("https://example.com/a.png") is None
    assert not os.path.exists(buffer_dir)
    assert local.exists()


def test_offscreen_surface_removed_on_failure(tmp_path):
    with pytest.raises(RuntimeError):
        with OffscreenSurface(_surface(), base_dir=str(tmp_path)) as clone:
            buffer_dir = clone.base_dir
            raise RuntimeError("render failed")
    assert not os.path.exists(buffer_dir)


def test_offscreen_surface_debug_keeps_buffer(tmp_path):
    with OffscreenSurface(_surface(), base_dir=str(tmp_path), debug=True) as clone:
        buffer_dir = clone.base_dir
    assert os.path.isdir(buffer_dir)


def test_offscreen_surface_removed_when_image_write_fails(tmp_path, monkeypatch):
    def no_space(path, mode="r", *args, **kwargs):
        raise OSError("No space left on device")

    monkeypatch.setattr("docexport.docs.buffer.open", no_space, raising=False)
    uri = "data:image/png;base64," + base64.b64encode(b"pixels").decode()
    with pytest.raises(OSError):
        with OffscreenSurface(_surface(uri), base_dir=str(tmp_path)):
            pass
    assert os.listdir(tmp_path) == []
