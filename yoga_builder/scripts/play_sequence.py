"""Play a stored sequence in the terminal, announcing each pose as it starts.

    python -m yoga_builder.scripts.play_sequence <sequence-id> [--speed 2] [--start 1:30]
"""
import argparse
import asyncio
import logging
import sys
import uuid

from yoga_builder.core.db import dispose_engine, get_sessionmaker
from yoga_builder.core.logging_config import setup_logging
from yoga_builder.services import poses as pose_service
from yoga_builder.services import sequences as sequence_service
from yoga_builder.services.durations import format_duration, parse_duration
from yoga_builder.services.errors import NotFoundError
from yoga_builder.services.playback import LoggingAnnouncer, PlaybackState, SequencePlayer
from yoga_builder.services.timeline import spoken_name


logger = logging.getLogger(__name__)


async def load_player(sequence_id: uuid.UUID, speed: float) -> SequencePlayer:
    try:
        async with get_sessionmaker()() as session:
            seq = await sequence_service.get_viewable_sequence(session, sequence_id)
            catalog = await pose_service.build_pose_catalog(session)
    finally:
        await dispose_engine()

    logger.info("Playing %s (%s)", seq.name, format_duration(sequence_service.sequence_total_seconds(seq)))
    return SequencePlayer(
        sequence_service.sequence_timeline(seq),
        announcer=LoggingAnnouncer(),
        describe=lambda item: spoken_name(catalog.get(item.pose_instance.pose_variation_id)),
        speed=speed,
    )


def print_state(state: PlaybackState) -> None:
    sys.stdout.write(
        f"\r{format_duration(int(state.position))} / {format_duration(state.total)}"
        f"  ({state.progress:.0%})  next in {format_duration(int(state.item_remaining))}  "
    )
    sys.stdout.flush()


async def run(sequence_id: uuid.UUID, speed: float, start: int) -> PlaybackState:
    player = await load_player(sequence_id, speed)
    if start:
        player.seek(start)
    return await player.run(interval=0.25, on_tick=print_state)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Play a sequence with spoken pose names")
    parser.add_argument("sequence_id", type=uuid.UUID)
    parser.add_argument("--speed", type=float, default=1.0)
    parser.add_argument("--start", default="0", help="start position, e.g. 90 or 1:30")
    args = parser.parse_args(argv)

    setup_logging()
    try:
        asyncio.run(run(args.sequence_id, args.speed, parse_duration(args.start)))
    except NotFoundError:
        logger.error("Sequence %s not found or not published", args.sequence_id)
        return 1
    except ValueError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        pass
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
