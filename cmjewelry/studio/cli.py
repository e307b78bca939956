"""CLI entry point for the studio."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import StudioConfig, load_config
from .errors import StudioError, ValidationError
from .media import load_audio_file, load_image_file, save_image
from .orchestrator import EditOrchestrator
from .presets import PRESETS, AspectRatio, get_preset
from .session import StudioSession


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="cm-studio",
        description="CM Jewelry AI studio: edit product photos, write captions, record sales",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to the config file (TOML)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # presets
    sub.add_parser("presets", help="List preset edit styles")

    # edit
    edit_parser = sub.add_parser("edit", help="Apply an AI edit to a photo")
    edit_parser.add_argument("image", type=str, help="Product photo")
    prompt_group = edit_parser.add_mutually_exclusive_group(required=True)
    prompt_group.add_argument("--prompt", "-p", type=str, help="Edit instruction")
    prompt_group.add_argument(
        "--preset", type=str, choices=[p.id for p in PRESETS], help="Preset style"
    )
    edit_parser.add_argument(
        "--aspect",
        type=str,
        default=None,
        choices=[r.value for r in AspectRatio],
        help="Output aspect ratio",
    )
    edit_parser.add_argument(
        "--out", type=str, default=None, metavar="DIR", help="Output directory"
    )
    edit_parser.add_argument(
        "--drive", action="store_true", help="Also upload the result to Google Drive"
    )

    # caption
    caption_parser = sub.add_parser("caption", help="Write a social media caption")
    caption_parser.add_argument("image", type=str, help="Product photo")
    caption_parser.add_argument("--idea", type=str, default="", help="Optional angle")

    # transcribe
    transcribe_parser = sub.add_parser("transcribe", help="Transcribe an audio file")
    transcribe_parser.add_argument("audio", type=str, help="Audio file")

    # dictate
    sub.add_parser("dictate", help="Record from the microphone and transcribe")

    # upload
    upload_parser = sub.add_parser("upload", help="Upload a photo to Google Drive")
    upload_parser.add_argument("image", type=str, help="Photo to upload")
    upload_parser.add_argument(
        "--folder", type=str, default=None, help="Google Drive folder ID"
    )

    # sale
    sale_parser = sub.add_parser("sale", help="Record a sale in the ledger")
    sale_parser.add_argument("--staff", type=str, required=True, help="Staff name")
    sale_parser.add_argument("--client", type=str, required=True)
    sale_parser.add_argument("--contact", type=str, default="")
    sale_parser.add_argument("--client-type", type=str, default="")
    sale_parser.add_argument("--product", type=str, required=True)
    sale_parser.add_argument("--code", type=str, default="")
    sale_parser.add_argument("--category", type=str, default="")
    sale_parser.add_argument("--quantity", type=int, default=1)
    sale_parser.add_argument("--unit-price", type=float, required=True)
    sale_parser.add_argument("--discount", type=float, default=0)
    sale_parser.add_argument("--total-cost", type=float, default=0)
    sale_parser.add_argument("--payment", type=str, default="")
    sale_parser.add_argument("--notes", type=str, default="")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    from dotenv import load_dotenv

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    ok = True
    try:
        match args.command:
            case "presets":
                _cmd_presets()
            case "edit":
                ok = asyncio.run(_cmd_edit(config, args))
            case "caption":
                ok = asyncio.run(_cmd_caption(config, args))
            case "transcribe":
                ok = asyncio.run(_cmd_transcribe(config, args))
            case "dictate":
                ok = asyncio.run(_cmd_dictate(config))
            case "upload":
                ok = asyncio.run(_cmd_upload(config, args))
            case "sale":
                ok = asyncio.run(_cmd_sale(config, args))
    except (StudioError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not ok:
        sys.exit(1)


def _build_orchestrator(config: StudioConfig, with_drive: bool = False) -> EditOrchestrator:
    from .ai import create_backend, create_caption_backend

    session = StudioSession(
        history_limit=config.studio.history_limit,
        aspect_ratio=config.studio.default_aspect_ratio,
    )
    uploader = _build_uploader(config) if with_drive else None
    return EditOrchestrator(
        session,
        create_backend(config),
        caption_backend=create_caption_backend(config),
        uploader=uploader,
        timeout=config.studio.request_timeout,
    )


def _build_uploader(config: StudioConfig):
    from .gdrive import GoogleDriveUploader

    if not config.gdrive.enabled:
        raise ValidationError(
            "Google Drive upload is disabled. Set enabled = true under [gdrive] in the config file."
        )
    return GoogleDriveUploader(
        access_token=config.gdrive.access_token,
        credentials_path=config.gdrive.credentials_path,
        token_path=config.gdrive.token_path,
        folder_id=config.gdrive.folder_id,
    )


def _load_photo(path: str):
    image = load_image_file(path)
    if image is None:
        raise ValueError(f"Not an image file: {path}")
    return image


def _report_failure(orchestrator: EditOrchestrator) -> bool:
    print(f"Error: {orchestrator.session.error}", file=sys.stderr)
    return False


def _cmd_presets() -> None:
    print(f"Preset styles: {len(PRESETS)}")
    for p in PRESETS:
        print(f"  {p.icon} {p.id:<14} {p.name}")


async def _cmd_edit(config: StudioConfig, args) -> bool:
    orchestrator = _build_orchestrator(config, with_drive=args.drive)
    session = orchestrator.session
    session.set_original(_load_photo(args.image))
    if args.preset:
        session.apply_preset(get_preset(args.preset))
    else:
        session.prompt = args.prompt

    print("✨ Editing photo...")
    entry = await orchestrator.apply_edit(aspect_ratio=args.aspect)
    if entry is None:
        return _report_failure(orchestrator)

    out_dir = Path(args.out or config.studio.export_dir)
    saved = save_image(entry.processed, out_dir)
    print(f"   Saved: {saved}")

    if args.drive:
        print("☁  Uploading to Google Drive...")
        drive_file = await orchestrator.upload_processed(filename=saved.name)
        if drive_file is None:
            return _report_failure(orchestrator)
        print(f"   Uploaded: {drive_file.web_view_link or drive_file.id}")
    return True


async def _cmd_caption(config: StudioConfig, args) -> bool:
    orchestrator = _build_orchestrator(config)
    orchestrator.session.set_original(_load_photo(args.image))

    caption = await orchestrator.generate_caption(args.idea)
    if caption is None:
        return _report_failure(orchestrator)
    print(caption)
    return True


async def _cmd_transcribe(config: StudioConfig, args) -> bool:
    orchestrator = _build_orchestrator(config)
    text = await orchestrator.transcribe(load_audio_file(args.audio))
    if text is None:
        return _report_failure(orchestrator)
    print(text)
    return True


async def _cmd_dictate(config: StudioConfig) -> bool:
    from .recorder import MicrophoneRecorder

    orchestrator = _build_orchestrator(config)
    with MicrophoneRecorder(
        sample_rate=config.audio.sample_rate,
        channels=config.audio.channels,
    ) as recorder:
        recorder.start()
        print("🎙  Recording... press Enter to stop.")
        await asyncio.to_thread(input)
        text = await orchestrator.transcribe_recording(recorder)

    if text is None:
        return _report_failure(orchestrator)
    print(orchestrator.session.prompt)
    return True


async def _cmd_upload(config: StudioConfig, args) -> bool:
    image = _load_photo(args.image)
    uploader = _build_uploader(config)
    print("☁  Uploading to Google Drive...")
    drive_file = await uploader.upload_image_async(
        image, Path(args.image).name, folder_id=args.folder
    )
    print(f"   Uploaded: {drive_file.name} ({drive_file.web_view_link or drive_file.id})")
    return True


async def _cmd_sale(config: StudioConfig, args) -> bool:
    from .sales import SaleLedger, SaleRecord, StaffRoster

    roster = StaffRoster(config.staff.members)
    roster.sign_in(args.staff)

    sale = SaleRecord(
        client=args.client,
        contact=args.contact,
        client_type=args.client_type,
        product=args.product,
        code=args.code,
        category=args.category,
        quantity=args.quantity,
        unit_price=args.unit_price,
        discount=args.discount,
        total_cost=args.total_cost,
        payment_method=args.payment,
        notes=args.notes,
    )
    ledger = SaleLedger(
        config.ledger.webhook_url,
        timeout=config.ledger.timeout,
        require_ack=config.ledger.require_ack,
    )
    receipt = await ledger.record(sale, roster)
    status = "recorded" if receipt.acknowledged else "sent"
    print(
        f"Sale {status} at {receipt.recorded_at}: total {sale.total:.2f}, "
        f"profit {sale.profit:.2f} (key {receipt.idempotency_key})"
    )
    return True
