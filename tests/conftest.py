import os

import pytest

OPENAPI_V3_DIR = os.path.join(os.path.dirname(__file__), "fixtures", "openapi", "v3")


@pytest.fixture
def openapi_dir():
    return OPENAPI_V3_DIR


@pytest.fixture
def root(openapi_dir):
    from kubectl_param_tool.openapi3 import EmbeddedFileClient, Root

    return Root(EmbeddedFileClient(openapi_dir))
