#!/usr/bin/env python3
"""
Mood Radio
Main CLI entry point for listing moods, fetching mood radio playlists
and playing them through the queued playback controller.
"""

import sys
import json
import asyncio
import argparse
import os
from datetime import datetime

from config.settings import Settings, configure_logging
from moodradio.api.catalog_client import CatalogClient
from moodradio.errors import MoodRadioError
from moodradio.models.playback_state import PlaybackSnapshot
from moodradio.services.audio_backend import SimulatedAudioBackend
from moodradio.services.playback_controller import PlaybackController
from moodradio.services.timers import AsyncioTicker
from moodradio.utils.cache_manager import CacheManager

def run_tests():
    """Run the test suite."""
    print("🧪 Running Mood Radio Test Suite...")
    print("=" * 60)

    try:
        import pytest
    except ImportError:
        print("❌ pytest not found. Install the test extra: pip install -e .[test]")
        return 1

    test_args = [
        "-v",  # Verbose output
        "--tb=short",  # Short traceback format
        "tests/",
    ]

    exit_code = pytest.main(test_args)
    if exit_code == 0:
        print("\n✅ All tests passed!")
    else:
        print(f"\n❌ Some tests failed (exit code: {exit_code})")
    return exit_code

def build_client(settings: Settings, cache_manager=None) -> CatalogClient:
    return CatalogClient(
        base_url=settings.catalog.base_url,
        timeout=settings.catalog.timeout,
        max_retries=settings.catalog.max_retries,
        cache_manager=cache_manager,
        moods_ttl=settings.cache.moods_ttl
    )

def display_playlist_summary(playlist):
    """Display a summary of a mood radio playlist."""
    mood = playlist.get('mood', {})
    stats = playlist.get('stats', {})

    print("\n" + "="*60)
    print(f"{mood.get('icon', '🎵')} {playlist['name']}")
    print("="*60)
    print(f"Description: {playlist['description']}")
    print(f"Total Tracks: {stats.get('totalTracks', len(playlist['tracks']))}")
    print(f"Total Duration: {int(stats.get('totalDuration', 0)) // 60} min")
    print(f"Average Intensity: {stats.get('averageIntensity', 0)}")

    print(f"\nTracks:")
    print("-" * 60)
    for i, track in enumerate(playlist['tracks'][:10], 1):
        name = track.get('title') or 'Unknown Track'
        artist = track.get('artistName') or 'Unknown Artist'
        duration = track.get('formattedDuration') or '0:00'
        plays = (track.get('stats') or {}).get('plays', 0)

        print(f"{i:2d}. {name} - {artist}")
        print(f"    Mood: {track.get('dominantMood', 'unknown')} | Duration: {duration} | Plays: {plays}")

    if len(playlist['tracks']) > 10:
        print(f"    ... and {len(playlist['tracks']) - 10} more tracks")

    print("-" * 60)

def get_output_path(filename=None, mood="radio"):
    """Generate output path inside output/playlists."""
    output_dir = "output/playlists"
    os.makedirs(output_dir, exist_ok=True)

    if filename:
        if not filename.startswith(output_dir):
            filename = os.path.join(output_dir, os.path.basename(filename))
        return filename

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return os.path.join(output_dir, f"{mood}_radio_{timestamp}.json")

async def list_moods(args):
    """Print the mood categories known to the server."""
    settings = Settings()
    cache_manager = CacheManager(settings.cache.redis_url)
    await cache_manager.connect()

    try:
        async with build_client(settings, cache_manager) as client:
            moods = await client.get_moods()
            print(f"\n🎛️  {len(moods)} moods available:")
            for mood in moods:
                print(f"  {mood.icon} {mood.id:<12} {mood.name} ({', '.join(mood.tags)})")
    except MoodRadioError as e:
        print(f"❌ {e.message}")
    finally:
        await cache_manager.close()

async def fetch_radio(args):
    """Fetch a mood radio playlist from the server and optionally save it."""
    settings = Settings()

    try:
        async with build_client(settings) as client:
            print(f"Fetching {args.mood} radio ({args.limit} tracks)...")
            playlist = await client.get_mood_radio(args.mood, limit=args.limit, shuffle=not args.no_shuffle)

            playlist_dict = playlist.to_dict()
            display_playlist_summary(playlist_dict)

            if args.output:
                output_path = get_output_path(args.output, playlist.mood.id)
                with open(output_path, 'w') as f:
                    json.dump(playlist_dict, f, indent=2, ensure_ascii=False)
                print(f"\n💾 Playlist saved to: {output_path}")
                print(f"📁 Full path: {os.path.abspath(output_path)}")

    except MoodRadioError as e:
        print(f"❌ {e.message} ({e.code.value})")

def describe_transition(previous: PlaybackSnapshot, current: PlaybackSnapshot):
    """Print track and status changes of the player."""
    previous_id = previous.current_track.id if previous.current_track else None
    current_id = current.current_track.id if current.current_track else None

    if current_id != previous_id and current.current_track:
        track = current.current_track
        print(f"▶️  [{current.cursor + 1}/{len(current.playlist)}] {track.title} - {track.artist_name}")
    if current.status != previous.status:
        print(f"   status: {previous.status.value} -> {current.status.value}")
    if current.last_error and current.last_error != previous.last_error:
        print(f"   ⚠️  {current.last_error}")

async def play_radio(args):
    """Fetch a mood radio and play it on the simulated audio backend."""
    settings = Settings()

    try:
        async with build_client(settings) as client:
            playlist = await client.get_mood_radio(args.mood, limit=args.limit, shuffle=not args.no_shuffle)
            if not playlist.tracks:
                print(f"🔇 No tracks found for {playlist.mood.name}")
                return

            display_playlist_summary(playlist.to_dict())

            async with PlaybackController(
                backend=SimulatedAudioBackend(),
                catalog=client,
                ticker=AsyncioTicker(),
                settings=settings
            ) as controller:
                last = {"state": controller.state}

                def on_change(snapshot):
                    describe_transition(last["state"], snapshot)
                    last["state"] = snapshot

                controller.subscribe(on_change)
                await controller.play(playlist.tracks[0], playlist=playlist.tracks, start_index=0)
                await asyncio.sleep(args.seconds)

                state = controller.state
                print(f"\n⏹️  Stopped after {args.seconds}s, {len(state.history)} tracks played")

    except MoodRadioError as e:
        print(f"❌ {e.message} ({e.code.value})")

def main():
    """Main entry point with command line argument parsing."""
    parser = argparse.ArgumentParser(description='Mood Radio: mood-based playlists and playback')
    settings = Settings()
    configure_logging(settings)

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('moods', help='List mood categories')

    radio_parser = subparsers.add_parser('radio', help='Fetch a mood radio playlist')
    radio_parser.add_argument('mood', type=str, help='Mood identifier, e.g. energy')
    radio_parser.add_argument('--limit', type=int, default=settings.radio.default_limit, help='Number of tracks (default: 50)')
    radio_parser.add_argument('--no-shuffle', action='store_true', dest='no_shuffle', help='Rank by popularity instead of shuffling')
    radio_parser.add_argument('--output', type=str, help='Output file path')

    play_parser = subparsers.add_parser('play', help='Play a mood radio on the simulated player')
    play_parser.add_argument('mood', type=str, help='Mood identifier, e.g. energy')
    play_parser.add_argument('--limit', type=int, default=settings.radio.default_limit, help='Number of tracks (default: 50)')
    play_parser.add_argument('--no-shuffle', action='store_true', dest='no_shuffle', help='Rank by popularity instead of shuffling')
    play_parser.add_argument('--seconds', type=float, default=30.0, help='How long to play (default: 30)')

    subparsers.add_parser('test', help='Run the test suite')

    args = parser.parse_args()

    if args.command == 'moods':
        asyncio.run(list_moods(args))
    elif args.command == 'radio':
        asyncio.run(fetch_radio(args))
    elif args.command == 'play':
        asyncio.run(play_radio(args))
    elif args.command == 'test':
        sys.exit(run_tests())
    else:
        parser.print_help()

if __name__ == "__main__":
    main()
