from __future__ import annotations

import hashlib
import os

from inbound.app import config


class FileSignatureStore:
    """
    Stockage opaque des signatures (data URL, SVG, ...).

    Le contenu n'est pas interprété ; la référence est dérivée du contenu
    (sha256), donc un même artefact renvoie toujours la même référence.
    """

    def __init__(self, root: str):
        self.root = root

    def store(self, artifact: str) -> str:
        digest = hashlib.sha256(artifact.encode("utf-8")).hexdigest()
        os.makedirs(self.root, exist_ok=True)
        path = os.path.join(self.root, f"{digest}.sig")
        if not os.path.exists(path):
            with open(path, "w", encoding="utf-8") as f:
                f.write(artifact)
        return f"sig:{digest}"


def default_signature_store() -> FileSignatureStore:
    return FileSignatureStore(config.SIGNATURE_DIR)
