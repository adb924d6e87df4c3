"""
CLI entry point: a live pygame window driven by an audio file.

Usage:
    spectracanvas <audio_file> [options]
    spectracanvas --demo [options]
"""

import argparse
import logging
import sys
from pathlib import Path

import librosa
import numpy as np
import pygame

from spectracanvas.config import EngineConfig
from spectracanvas.core.source import SignalSpectrumSource
from spectracanvas.engine import FrameDriver
from spectracanvas.modes import Mode
from spectracanvas.render.canvas import Canvas, SurfaceUnavailableError

MODE_KEYS = {pygame.K_1 + i: mode for i, mode in enumerate(Mode)}
HUE_STEP = 10


def load_audio(path: Path, sample_rate=None):
    """Decode an audio file to a mono float32 signal at its native rate."""
    signal, sr = librosa.load(str(path), sr=sample_rate, mono=True)
    return signal.astype(np.float32), int(sr)


def demo_signal(duration: float = 30.0, sample_rate: int = 44100) -> np.ndarray:
    """A minor chord over a four-on-the-floor kick."""
    t = np.arange(int(duration * sample_rate)) / sample_rate
    chord = sum(np.sin(2 * np.pi * f * t) for f in (220.0, 261.63, 329.63, 1318.5)) * 0.12

    beat = t % 0.5
    kick = np.sin(2 * np.pi * (50 + 100 * np.exp(-beat * 30)) * beat) * np.exp(-beat * 8) * 0.5
    return (chord + kick).astype(np.float32)


class WindowHost:
    """Shows the driver's canvas in a resizable window and forwards input."""

    def __init__(self, driver: FrameDriver, title: str = "spectracanvas"):
        self.driver = driver
        pygame.display.init()
        pygame.display.set_caption(title)
        self.screen = pygame.display.set_mode(driver.canvas.size, pygame.RESIZABLE)

    def handle_events(self):
        state = self.driver.state
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.driver.detach()
            elif event.type == pygame.VIDEORESIZE:
                self.driver.request_size(event.w, event.h)
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.driver.detach()
                elif event.key in MODE_KEYS:
                    state.set_mode(MODE_KEYS[event.key])
                elif event.key == pygame.K_LEFT:
                    state.set_hue_shift(state.hue_shift - HUE_STEP)
                elif event.key == pygame.K_RIGHT:
                    state.set_hue_shift(state.hue_shift + HUE_STEP)

    def present(self, canvas: Canvas):
        frame = pygame.surfarray.make_surface(canvas.to_array().swapaxes(0, 1))
        self.screen = pygame.display.get_surface()
        if frame.get_size() != self.screen.get_size():
            frame = pygame.transform.scale(frame, self.screen.get_size())
        self.screen.blit(frame, (0, 0))
        pygame.display.flip()
        self.handle_events()

    def close(self):
        pygame.display.quit()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spectracanvas",
        description="Audio-reactive spectrum visualizer",
    )

    parser.add_argument(
        "audio",
        type=Path,
        nargs="?",
        default=None,
        help="Input audio file (wav, mp3, flac)",
    )

    parser.add_argument(
        "--demo",
        action="store_true",
        help="Play a built-in synthetic signal instead of a file",
    )

    parser.add_argument(
        "-m", "--mode",
        type=str,
        choices=[m.value for m in Mode],
        default=None,
        help="Starting visualization mode (default: circular)",
    )

    parser.add_argument(
        "--hue",
        type=int,
        default=None,
        help="Global hue shift in degrees (default: 0)",
    )

    # Resolution & framerate
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Window width (default: 1280)",
    )

    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Window height (default: 720)",
    )

    parser.add_argument(
        "-f", "--fps",
        type=int,
        default=None,
        help="Target frames per second (default: 60)",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for particle layouts and camera shake",
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="JSON file with engine settings; flags override it",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log engine events",
    )

    return parser


def build_config(args: argparse.Namespace) -> EngineConfig:
    """Config file values first, then any flags given on the command line."""
    data = {}
    if args.config is not None:
        data.update(EngineConfig.from_json(args.config).__dict__)

    overrides = {
        "mode": args.mode,
        "hue_shift": args.hue,
        "width": args.width,
        "height": args.height,
        "fps": args.fps,
        "seed": args.seed,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})
    return EngineConfig.from_dict(data)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.audio is None and not args.demo:
        parser.error("an audio file or --demo is required")
    if args.audio is not None and not args.audio.exists():
        print(f"Error: Audio file not found: {args.audio}", file=sys.stderr)
        sys.exit(1)

    try:
        config = build_config(args)
    except (OSError, ValueError) as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    if args.demo:
        sample_rate = 44100
        signal = demo_signal(sample_rate=sample_rate)
        print("Playing demo signal")
    else:
        print(f"Loading audio: {args.audio}")
        signal, sample_rate = load_audio(args.audio)
    print(f"  Duration: {len(signal) / sample_rate:.1f}s @ {sample_rate} Hz")

    source = SignalSpectrumSource(
        signal,
        sample_rate,
        fft_size=config.fft_size,
        smoothing=config.smoothing,
        min_decibels=config.min_decibels,
        max_decibels=config.max_decibels,
    )
    driver = FrameDriver(config, source=source)
    host = WindowHost(driver)

    print(f"Rendering {config.width}x{config.height} @ {config.fps}fps, mode: {driver.state.mode.value}")
    print("  Keys: 1-7 mode, left/right hue, Esc quit")

    try:
        ticks = driver.run(present=host.present)
    except SurfaceUnavailableError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        host.close()

    print(f"\nDone! {ticks} frames, {driver.skipped_frames} skipped")


if __name__ == "__main__":
    main()
