import json
import pytest
from cellbuf.binary.buffer import Buffer
from cellbuf.cli import main
from cellbuf.mediumio.read import MediumFileError, read_medium_file
from cellbuf.mediumio.write import write_medium_file
from cellbuf.models.config import BufferConfig
from cellbuf.models.medium_file import MediumFile
from cellbuf.storage.memory import InMemoryMedium


def test_medium_file_roundtrip(tmp_path):
    path = tmp_path / "medium.json"
    buf = Buffer(InMemoryMedium(), BufferConfig(grid_width=4))
    buf.write_string("héllo \U0001F600", charset="utf16", byteorder="little")
    buf.write_f64(-0.5)
    write_medium_file(buf.medium, path, grid_width=4)

    medium, width = read_medium_file(path)
    assert width == 4
    again = Buffer(medium, BufferConfig(grid_width=width))
    assert again.read_string(0, charset="utf16", byteorder="little") == "héllo \U0001F600"
    assert again.read_f64() == -0.5


def test_medium_document_from_text():
    doc = MediumFile.from_json('{"version": 1, "grid_width": 2, "cells": []}')
    assert doc.grid_width == 2
    assert MediumFile.from_json(doc.to_json(pretty=False)) == doc


@pytest.mark.parametrize("text", [
    '{"version": 99, "grid_width": 2, "cells": []}',
    '{"version": 1, "grid_width": 0, "cells": []}',
    '{"version": 1, "cells": [{"row": 0, "col": 0, "slot": 27, "state": {"kind": "zero"}}]}',
    '{"version": 1, "cells": [{"row": 0, "col": 0, "slot": 0, "state": {"kind": "purple"}}]}',
    '{"version": 1, "grid_width": 1, "cells": [{"row": 5, "col": 5, "slot": 0, "state": {"kind": "zero"}}]}',
    "{not json",
])
def test_bad_medium_documents(text):
    with pytest.raises(MediumFileError):
        MediumFile.from_json(text)


def test_non_utf8_medium_bytes():
    with pytest.raises(MediumFileError):
        MediumFile.from_json(b"\xff\xfe")


def test_cli_demo_roundtrip(tmp_path, capsys):
    path = str(tmp_path / "m.json")
    assert main(["init", path, "--grid-width", "2"]) == 0
    assert main(["write-demo", path]) == 0
    capsys.readouterr()

    assert main(["read-demo", path]) == 0
    assert json.loads(capsys.readouterr().out) == [[5, -64, 4], [5, -64, 5]]

    assert main(["info", path]) == 0
    info = json.loads(capsys.readouterr().out)
    assert info == {"grid_width": 2, "capacity": 108, "used_bytes": 27, "occupied_cells": 27}

    assert main(["dump", path, "--length", "3"]) == 0
    assert capsys.readouterr().out.strip() == "00000000  14 00 02"


def test_cli_custom_points(tmp_path, capsys):
    path = str(tmp_path / "m.json")
    main(["init", path])
    assert main(["write-demo", path, "--point", "1", "2", "3"]) == 0
    capsys.readouterr()
    main(["read-demo", path])
    assert json.loads(capsys.readouterr().out) == [[1, 2, 3]]


def test_cli_read_demo_on_empty_medium(tmp_path, capsys):
    path = str(tmp_path / "m.json")
    main(["init", path])
    assert main(["read-demo", path]) == 1
    assert "nothing to read" in capsys.readouterr().err


def test_cli_missing_file(tmp_path, capsys):
    assert main(["info", str(tmp_path / "absent.json")]) == 1


def test_occupancy_grid():
    from cellbuf.viz import occupancy_grid
    buf = Buffer(InMemoryMedium(), BufferConfig(grid_width=2))
    buf.write_bytes(bytes(30))
    assert occupancy_grid(buf.medium, 2) == [[27, 3], [0, 0]]


def test_cli_non_utf8_file(tmp_path, capsys):
    path = tmp_path / "m.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    assert main(["info", str(path)]) == 1
    assert "not valid UTF-8" in capsys.readouterr().err


def test_cli_rejects_cells_outside_grid(tmp_path, capsys):
    path = tmp_path / "m.json"
    path.write_text(
        '{"version": 1, "grid_width": 1, "cells": [{"row": 5, "col": 5, "slot": 0, "state": {"kind": "zero"}}]}'
    )
    assert main(["info", str(path)]) == 1
    assert "outside" in capsys.readouterr().err
