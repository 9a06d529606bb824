import subprocess
import sys

import pytest

from fastq_composition import BaseComposition
from fastq_composition.plot import calc_mean, calc_sd, plot_composition, read_composition


def test_calc_mean():
    """Test integer mean across libraries."""
    libs = [
        [BaseComposition(1, 7, 8, 55, 27, 2)],
        [BaseComposition(1, 7, 8, 53, 30, 2)],
    ]
    assert calc_mean(libs, 0).tolist() == [7, 8, 54, 28, 2]


def test_calc_sd():
    """Test sample standard deviation across libraries."""
    libs = [
        [BaseComposition(1, 25, 0, 75, 0, 10)],
        [BaseComposition(1, 75, 100, 100, 0, 10)],
    ]
    mean = calc_mean(libs, 0)
    assert mean.tolist() == [50, 50, 87, 0, 10]
    assert calc_sd(libs, mean, 0).tolist() == [35, 71, 18, 0, 0]


def test_calc_sd_single_library():
    libs = [[BaseComposition(1, 20, 20, 20, 20, 20)]]
    assert calc_sd(libs, calc_mean(libs, 0), 0).tolist() == [0, 0, 0, 0, 0]


def test_read_composition(tmp_path):
    path = tmp_path / "comp.json"
    path.write_text('{"lib":[{"pos":1,"bases":{"A":100,"T":0,"G":0,"C":0,"N":0}}],"len":1}\n')
    length, table = read_composition(path)
    assert length == 1
    assert table == [BaseComposition(1, 100, 0, 0, 0, 0)]


@pytest.mark.parametrize("n_libs", [0, 1, 3])
def test_plot_composition_writes_image(tmp_path, n_libs):
    table = [BaseComposition(pos, 40, 30, 20, 10, 0) for pos in range(1, 11)]
    libs = [
        [BaseComposition(pos, 40 + i, 30 - i, 20, 10, 0) for pos in range(1, 11)]
        for i in range(n_libs)
    ]
    output = tmp_path / "comp.png"
    plot_composition(table, libs, output)
    assert output.stat().st_size > 0


def test_plot_empty_composition(tmp_path):
    output = tmp_path / "empty.svg"
    plot_composition([], [], output)
    assert output.exists()


def test_import_keeps_callers_backend():
    """Test that importing the package leaves the matplotlib backend alone."""
    code = (
        "import matplotlib; matplotlib.use(\"svg\"); "
        "import fastq_composition, fastq_composition.plot; "
        "print(matplotlib.get_backend())"
    )
    result = subprocess.run(
        [sys.executable, "-c", code], capture_output=True, text=True, check=True
    )
    assert result.stdout.strip() == "svg"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
