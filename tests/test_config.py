import os

import pytest

from femesh.config import FUNCTIONS, Config, load_config, parse_line

CONFIG = """# Config file for FEM solver

# Integration order
integration_order = 2

# Mesh file (located in meshes/)
mesh_file = square2d_4elt.msh

# Problem parameters
source = quadratic_f
boundary = quadratic_g

# Solution (optional)
sol = quadratic_g
dx_sol = quadratic_dx
dy_sol = quadratic_dy

# Plot label
label = quadratic
"""


def write(tmp_path, text):
    path = tmp_path / "config_file.txt"
    path.write_text(text)
    return path


def test_parse_line():
    assert parse_line("mesh_file = a.msh") == ("mesh_file", "a.msh")


def test_parse_line_missing_value():
    assert parse_line("label =") == ("label", "")


def test_default_config():
    config = Config()
    assert config.integration_order == 1
    assert config.label == "constant"
    assert config.mesh_path == os.path.join("../meshes/", "square2d_4elt.msh")
    assert config.source is FUNCTIONS["constant"]
    assert config.boundary is FUNCTIONS["zero"]
    assert config.solution is None


def test_load_full_config(tmp_path, capsys):
    config = load_config(write(tmp_path, CONFIG), "meshes")
    assert config.integration_order == 2
    assert config.mesh_path == os.path.join("meshes", "square2d_4elt.msh")
    assert config.label == "quadratic"
    assert config.source is FUNCTIONS["quadratic_f"]
    assert config.boundary is FUNCTIONS["quadratic_g"]
    assert config.solution is FUNCTIONS["quadratic_g"]
    assert config.dx_solution is FUNCTIONS["quadratic_dx"]
    assert config.dy_solution is FUNCTIONS["quadratic_dy"]
    out = capsys.readouterr().out
    assert out.startswith("Loaded config:")
    assert " - label: quadratic" in out


def test_functions_evaluate():
    assert FUNCTIONS["quadratic_g"](1.0, 2.0) == pytest.approx(5.0)
    assert FUNCTIONS["quadratic_dx"](3.0, 0.0) == pytest.approx(6.0)
    assert FUNCTIONS["quadratic_f"](0.3, 0.7) == -4.0


def test_unknown_names_keep_defaults(tmp_path):
    text = "integration_order = 3\nsource = nothing\nboundary = NONE\nsol = NONE\n"
    config = load_config(write(tmp_path, text), "meshes")
    assert config.integration_order == 3
    assert config.source is FUNCTIONS["constant"]
    assert config.boundary is FUNCTIONS["zero"]
    assert config.solution is None
    assert config.label == ""


def test_missing_integration_order(tmp_path):
    with pytest.raises(ValueError):
        load_config(write(tmp_path, "label = x\n"), "meshes")


def test_unreadable_file_gives_defaults(tmp_path, capsys):
    config = load_config(tmp_path / "missing.txt", "elsewhere")
    assert config.mesh_path == os.path.join("elsewhere", "square2d_4elt.msh")
    assert config.integration_order == 1
    assert "resorting to default parameters" in capsys.readouterr().out


def test_entries_recorded(tmp_path):
    config = load_config(write(tmp_path, CONFIG), "meshes")
    assert config.entries["mesh_file"] == "square2d_4elt.msh"
    assert config.entries["sol"] == "quadratic_g"