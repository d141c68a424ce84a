import os
import shutil
import tempfile
from functools import partial
from pathlib import Path

import pytest


@pytest.fixture(scope="function")
def mkdtemp(request):
    def _mkdtemp(*args, **kwargs):
        path = Path(tempfile.mkdtemp())
        cleanup = partial(shutil.rmtree, path, ignore_errors=True)

        request.addfinalizer(cleanup)
        return path

    return _mkdtemp


@pytest.fixture
def pushd(request):
    def _pushd(path):
        popd = partial(os.chdir, os.getcwd())
        request.addfinalizer(popd)
        os.chdir(path)

        return popd

    return _pushd


@pytest.fixture
def spec_file(mkdtemp):
    """Write spec file contents to a temporary directory and return the path"""

    def _spec_file(contents, name="grants.yml"):
        path = mkdtemp() / name
        path.write_text(contents)
        return str(path)

    return _spec_file
