import os
import json
from typing import Any, Dict

from .errors import ArtifactError


def artifact_path(artifacts_dir: str, name: str) -> str:
    """Hardhat layout: <artifacts>/contracts/<Name>.sol/<Name>.json"""
    return os.path.join(artifacts_dir, 'contracts', f'{name}.sol', f'{name}.json')


def load_artifact(artifacts_dir: str, name: str) -> Dict[str, Any]:
    """Loads a contract's ABI and bytecode from its JSON artifact."""
    file_path = artifact_path(artifacts_dir, name)
    try:
        with open(file_path, 'r') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ArtifactError(f"Artifact for {name} not found at {file_path}. Compile the contracts first.")
    except json.JSONDecodeError as e:
        raise ArtifactError(f"Artifact {file_path} is not valid JSON: {e}")

    missing = [key for key in ('abi', 'bytecode') if not data.get(key)]
    if missing:
        raise ArtifactError(f"Artifact {file_path} is missing {', '.join(missing)}")
    return {'abi': data['abi'], 'bytecode': data['bytecode']}
