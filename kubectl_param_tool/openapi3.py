"""Read-only access to an API server's OpenAPI v3 documents.

The server publishes one document per group-version, indexed by keys such as
``api/v1`` and ``apis/batch/v1``. A Root resolves a GroupVersion to its parsed
document through a document client; fetching and caching those documents from
a live server is left to the client implementation.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from kubectl_param_tool.resource.query_param import SchemaError
from kubectl_param_tool.resource.schema import GroupVersion

logger = logging.getLogger(__name__)

OPENAPI_FILE_SUFFIX = "_openapi.json"


class GroupVersionNotFoundError(SchemaError):
    def __init__(self, gv: GroupVersion):
        self.gv = gv
        super().__init__(f"GroupVersion ({gv}) not found in OpenAPI V3 root")


class FileGroupVersion:
    """One group-version document stored as JSON on disk, parsed on first use."""

    def __init__(self, path: str):
        self.path = path
        self._schema: Optional[Dict[str, Any]] = None

    def schema(self) -> Dict[str, Any]:
        if self._schema is None:
            with open(self.path, encoding="utf-8") as f:
                self._schema = json.load(f)
        return self._schema


class EmbeddedFileClient:
    """Document client over a directory of downloaded OpenAPI v3 documents.

    File names encode the discovery key with ``/`` replaced by ``__``, e.g.
    ``apis__batch__v1_openapi.json`` holds ``apis/batch/v1``.
    """

    def __init__(self, directory: str):
        if not os.path.isdir(directory):
            raise FileNotFoundError(f"OpenAPI v3 directory not found: {directory}")
        self.directory = directory
        self._paths: Dict[str, FileGroupVersion] = {}
        for filename in sorted(os.listdir(directory)):
            if not filename.endswith(OPENAPI_FILE_SUFFIX):
                continue
            key = filename[: -len(OPENAPI_FILE_SUFFIX)].replace("__", "/")
            self._paths[key] = FileGroupVersion(os.path.join(directory, filename))
        logger.debug(f"Found {len(self._paths)} OpenAPI v3 documents in {directory}")

    def paths(self) -> Dict[str, FileGroupVersion]:
        return dict(self._paths)


class Root:
    """Entry point for looking up group-version documents."""

    def __init__(self, client):
        self._client = client

    def paths(self) -> Dict[str, Any]:
        return self._client.paths()

    def gv_spec(self, gv: GroupVersion) -> Dict[str, Any]:
        """Return the parsed document for ``gv``.

        Raises:
            GroupVersionNotFoundError: the server publishes no document for gv.
            SchemaError: the document could not be read or is not an object.
        """
        document = self.paths().get(gv.openapi_path())
        if document is None:
            raise GroupVersionNotFoundError(gv)

        try:
            spec = document.schema()
        except (OSError, ValueError) as e:
            raise SchemaError(f"Unable to read OpenAPI V3 document for {gv}: {e}") from e

        if not isinstance(spec, dict):
            raise SchemaError(f"Invalid OpenAPI V3 document for {gv}")
        return spec
