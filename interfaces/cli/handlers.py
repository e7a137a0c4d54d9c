from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional, TextIO

from application.services import (
    ModCreatorAuthorization,
    SimpleCreatorAuthorization,
    authenticate_creator,
    serialize_creator,
)
from application.translation import TranslationScheduler, update_creator_name_translation
from domain.exceptions import CreatorError, CreatorNotFound
from domain.models import CREATOR_ID_PROVIDERS
from domain.repositories import CreatorRepository, MinecraftAuthVerifier, NameTranslator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="creators",
        description="Authenticate, create and inspect creators from the command line.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    simple = commands.add_parser("simple", help="authenticate with a Creator ID only")
    simple.add_argument("creator_id")
    simple.add_argument("--ip", required=True)

    mod = commands.add_parser("mod", help="authenticate, create or update like the mod does")
    mod.add_argument("--provider", required=True, choices=CREATOR_ID_PROVIDERS)
    mod.add_argument("--creator-id", required=True)
    mod.add_argument("--name", default=None)
    mod.add_argument("--hwid", required=True)
    mod.add_argument("--ip", required=True)
    mod.add_argument("--access-token", default=None)
    mod.add_argument("--player-uuid", default=None)

    translate = commands.add_parser("translate", help="refresh a Creator Name translation now")
    translate.add_argument("creator_id")

    return parser


def run_cli(
    argv: Optional[List[str]],
    creator_repo: CreatorRepository,
    minecraft_auth: Optional[MinecraftAuthVerifier] = None,
    translator: Optional[NameTranslator] = None,
    translation_scheduler: Optional[TranslationScheduler] = None,
    out: TextIO = sys.stdout,
    err: TextIO = sys.stderr,
) -> int:
    """
    Run one CLI command and return the process exit code.

    Rejected claims print their message on `err` and exit with 1.
    """

    args = build_parser().parse_args(argv)

    try:
        if args.command == "simple":
            creator = authenticate_creator(
                SimpleCreatorAuthorization(creator_id=args.creator_id, ip=args.ip),
                creator_repo,
            )
        elif args.command == "mod":
            creator = authenticate_creator(
                ModCreatorAuthorization(
                    creator_id=args.creator_id,
                    creator_id_provider=args.provider,
                    creator_name=args.name,
                    hwid=args.hwid,
                    ip=args.ip,
                    minecraft_access_token=args.access_token,
                    minecraft_player_uuid=args.player_uuid,
                ),
                creator_repo,
                minecraft_auth,
                translation_scheduler,
            )
        else:
            if translator is None:
                err.write("No translation service configured (TRANSLATION_API_URL).\n")
                return 2
            creator = creator_repo.get_by_creator_id(args.creator_id)
            if creator is None:
                raise CreatorNotFound()
            update_creator_name_translation(creator, creator_repo, translator)
            creator = creator_repo.get_by_creator_id(args.creator_id) or creator
    except CreatorError as error:
        err.write(f"{error}\n")
        return 1

    out.write(json.dumps(serialize_creator(creator), indent=2) + "\n")
    return 0
