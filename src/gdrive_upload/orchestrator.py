#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later
# src/gdrive_upload/orchestrator.py
"""
Orchestratore dell'action gdrive-upload.

Responsabilità:
- Leggere gli input dell'action (una volta).
- Decodificare le credenziali e costruire il client Drive (una volta).
- Caricare i target in ordine, uno alla volta; il primo errore interrompe il run.

Note architetturali:
- Solo `cli()` termina il processo: mappa le eccezioni con `exit_code_for`. Gli altri
  moduli (e `main`) non chiamano `sys.exit()`.
- Client Drive e folder id sono costruiti qui e passati esplicitamente: niente singleton.
- I file già caricati prima di un errore restano su Drive (nessun rollback).
"""

from __future__ import annotations

import argparse
import sys
import uuid
from typing import Any, Callable, Dict, List, Mapping, NoReturn, Optional, Sequence

from .auth import build_credentials, build_drive_service, decode_service_account_info
from .drive.client import DriveStore, GoogleDriveStore
from .drive.upload import UploadOutcome, upload_file
from .env_utils import ensure_dotenv_loaded
from .exceptions import ConfigError, PipelineError, exit_code_for
from .inputs import ActionInputs, load_action_inputs
from .logging_utils import get_structured_logger, mask_partial
from .workflow import set_failed

StoreFactory = Callable[[Mapping[str, Any]], DriveStore]


def default_store_factory(info: Mapping[str, Any]) -> DriveStore:
    """Credenziali `drive.file` -> resource Drive v3 -> `GoogleDriveStore`."""
    return GoogleDriveStore(build_drive_service(build_credentials(info)))


def upload_targets(
    store: DriveStore,
    targets: Sequence[str],
    folder_id: str,
    overwrite: bool,
) -> List[UploadOutcome]:
    """Carica i target in ordine; la prima eccezione interrompe il ciclo e si propaga."""
    outcomes: List[UploadOutcome] = []
    for target in targets:
        outcomes.append(upload_file(store, target, folder_id, overwrite))
    return outcomes


def run(
    inputs: Optional[ActionInputs] = None,
    *,
    store_factory: Optional[StoreFactory] = None,
    run_id: Optional[str] = None,
) -> List[UploadOutcome]:
    """Esegue un run completo: input -> credenziali -> upload sequenziale."""
    logger = get_structured_logger("gdrive_upload.run", run_id=run_id)
    if inputs is None:
        inputs = load_action_inputs()

    # La chiave viene validata prima di qualunque costruzione del client
    info = decode_service_account_info(inputs.credentials)
    store = (store_factory or default_store_factory)(info)

    logger.info(
        "gdrive_upload.run.started",
        extra={
            "folder": mask_partial(inputs.parent_folder_id),
            "targets": len(inputs.targets),
            "overwrite": inputs.overwrite,
        },
    )
    outcomes = upload_targets(store, inputs.targets, inputs.parent_folder_id, inputs.overwrite)
    logger.info(
        "gdrive_upload.run.completed",
        extra={"targets": len(outcomes), "overwrite": inputs.overwrite},
    )
    return outcomes


# ------------------------------------ CLI ENTRYPOINT ------------------------------------


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Restituisce gli argomenti CLI dell'action (gli input arrivano da `INPUT_*`)."""
    p = argparse.ArgumentParser(description="Upload di file locali su una cartella Google Drive")
    p.add_argument("--env-file", type=str, default=None, help="File .env da caricare per esecuzioni locali")
    return p.parse_args(argv)


def main(args: argparse.Namespace) -> None:
    """Esegue il run, scrive `::error::` per il runner e rilancia l'eccezione."""
    run_id = uuid.uuid4().hex
    ensure_dotenv_loaded(args.env_file)
    early_logger = get_structured_logger("gdrive_upload", run_id=run_id)

    def _error_extra(exc: BaseException) -> Dict[str, Any]:
        return {"error_message": str(exc).splitlines()[0] if str(exc) else type(exc).__name__, "run_id": run_id}

    try:
        run(run_id=run_id)
    except KeyboardInterrupt:
        raise
    except ConfigError as exc:
        early_logger.error("cli.gdrive_upload.exit.config_error", extra=_error_extra(exc))
        set_failed(str(exc))
        raise
    except PipelineError as exc:
        early_logger.error("cli.gdrive_upload.exit.pipeline_error", extra=_error_extra(exc))
        set_failed(str(exc))
        raise
    except Exception as exc:  # noqa: BLE001
        early_logger.error("cli.gdrive_upload.exit.unhandled", extra=_error_extra(exc))
        set_failed(str(exc) or type(exc).__name__)
        raise PipelineError(str(exc)) from exc


def cli(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """Console script: exit 0 se tutti i target sono caricati, altrimenti `exit_code_for(exc)`.

    Ctrl+C termina con 130. Il messaggio per il runner è già stato scritto da `main`.
    """
    args = _parse_args(argv)
    try:
        main(args)
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as exc:  # noqa: BLE001
        sys.exit(exit_code_for(exc))
    sys.exit(0)


if __name__ == "__main__":
    cli()
