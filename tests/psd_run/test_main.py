import json

import pytest
from PIL import Image
from psd_tools import PSDImage

from psd_run.__main__ import main


@pytest.fixture
def empty_psd(tmp_path):
    path = tmp_path / "empty.psd"
    PSDImage.new("RGB", (8, 4)).save(str(path))
    return str(path)


@pytest.mark.psd
def test_render(empty_psd, tmp_path):
    output = str(tmp_path / "output.png")
    assert main(["render", empty_psd, output, "--hide", "1", "2"]) is None
    with Image.open(output) as image:
        assert image.size == (8, 4)
        assert image.mode == "RGBA"


@pytest.mark.psd
def test_tree(empty_psd, capsys):
    main(["-v", "tree", empty_psd])
    tree = json.loads(capsys.readouterr().out)
    assert tree == {"width": 8, "height": 4, "layers": []}


@pytest.mark.psd
def test_hints(empty_psd, tmp_path, capsys):
    hints = tmp_path / "hints.json"
    hints.write_text('{"qtpsdparser.hint": 1, "layers": {"5": {"type": 1}}}')
    main(["hints", empty_psd, "--restore", str(hints)])
    assert json.loads(capsys.readouterr().out)["layers"] == {}


@pytest.mark.psd
def test_errors(empty_psd, tmp_path):
    output = str(tmp_path / "output.png")
    assert main(["layer", empty_psd, "1", output]) == 1
    assert main(["text", empty_psd, "1", "Hello", output]) == 1


def test_version(capsys):
    with pytest.raises(SystemExit):
        main(["--version"])
