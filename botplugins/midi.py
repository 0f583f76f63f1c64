"""Write tunes from note text to MIDI, read MIDI back to note text, and score ear training."""

from __future__ import annotations

import io
import math
import subprocess
from collections.abc import Iterator
from os import PathLike
from pathlib import Path

import mido

NOTE_MAP = {
    "C": 60,
    "Db": 61,
    "D": 62,
    "Eb": 63,
    "E": 64,
    "F": 65,
    "Gb": 66,
    "G": 67,
    "Ab": 68,
    "A": 69,
    "Bb": 70,
    "B": 71,
}
_PITCH_NAMES = {value % 12: key for key, value in NOTE_MAP.items()}

TICKS_PER_BEAT = 960
DEFAULT_TIMBRE = 40
DEFAULT_LEVEL = 5
TEMPO_BPM = 72
VELOCITY = 120
_MAX_DELTA = 0x0FFFFFFF


def octave(base: int, oct: int) -> int:
    """Key number of pitch class ``base`` in octave ``oct`` (capped at 10).

    Octave 0 gives ``base`` itself; a result above 127 drops an octave.
    Arithmetic wraps at 8 bits.
    """
    base &= 0xFF
    oct &= 0xFF
    if oct > 10:
        oct = 10
    if oct == 0:
        return base
    result = (base + 12 * oct) & 0xFF
    if result > 127:
        result -= 12
    return result


def note_name(n: int) -> str:
    """Name of the pitch class of key ``n``, using flats for black keys."""
    return _PITCH_NAMES[(n & 0xFF) % 12]


def process_one(note: str) -> int:
    """Key number of a single note such as ``C#6``; the octave defaults to 5."""
    base = 0
    level = 0
    for ch in note.replace(" ", ""):
        if "A" <= ch <= "G":
            base = NOTE_MAP[ch] % 12
        elif ch == "b":
            base = (base - 1) & 0xFF
        elif ch == "#":
            base = (base + 1) & 0xFF
        elif "0" <= ch <= "9":
            level = (level * 10 + int(ch)) & 0xFF
    if level == 0:
        level = DEFAULT_LEVEL
    return octave(base, level)


def _atoi(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


def _ticks(length: int) -> int:
    """Duration of a note of power-of-two ``length`` in quarter notes."""
    if length >= 0:
        ticks = (TICKS_PER_BEAT << length) & 0xFFFFFFFF if length < 32 else 0
    else:
        shift = -length
        if shift >= 32:
            raise ValueError(f"note length out of range: {length}")
        ticks = TICKS_PER_BEAT >> shift
    if ticks > _MAX_DELTA:
        raise ValueError(f"note length out of range: {length}")
    return ticks


def _notes(text: str) -> Iterator[tuple[int, int, int]]:
    """Yield (delay before, key, duration) for each note of the text."""
    k = text.replace(" ", "")
    n = len(k)
    i = 0
    delay = 0
    while i < n:
        base = 0
        level = 0
        rest = False
        digits = ""
        while True:
            ch = k[i]
            if ch == "R":
                rest = True
                i += 1
            elif "A" <= ch <= "G":
                base = NOTE_MAP[ch] % 12
                i += 1
            elif ch == "b":
                base = (base - 1) & 0xFF
                i += 1
            elif ch == "#":
                base = (base + 1) & 0xFF
                i += 1
            elif "0" <= ch <= "9":
                level = (level * 10 + int(ch)) & 0xFF
                i += 1
            elif ch == "<":
                i += 1
                start = i
                while i < n and (k[i] == "-" or "0" <= k[i] <= "9"):
                    i += 1
                digits += k[start:i]
            else:
                raise ValueError(f"无法解析第{i}个位置的{ch}字符")
            if i >= n or "A" <= k[i] <= "G" or k[i] == "R":
                break
        ticks = _ticks(_atoi(digits))
        if rest:
            delay = ticks
            continue
        if level == 0:
            level = DEFAULT_LEVEL
        yield delay, octave(base, level), ticks
        delay = 0


def make_midi(
    path: str | PathLike[str], text: str, timbre: int = DEFAULT_TIMBRE
) -> bool:
    """Write the tune in ``text`` to a MIDI file played with program ``timbre``.

    Returns False without touching anything when the file already exists.
    Raises ValueError for text that does not parse or a timbre outside 0..127.
    """
    path = Path(path)
    if path.exists():
        return False
    if not 0 <= timbre <= 127:
        raise ValueError("音色应该在0~127之间")
    track = mido.MidiTrack(
        [
            mido.MetaMessage("time_signature", numerator=4, denominator=4, time=0),
            mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(TEMPO_BPM), time=0),
            mido.MetaMessage("instrument_name", name="Violin", time=0),
            mido.Message("program_change", channel=0, program=timbre, time=0),
        ]
    )
    for delay, key, ticks in _notes(text):
        key &= 0x7F
        track.append(
            mido.Message("note_on", channel=0, note=key, velocity=VELOCITY, time=delay)
        )
        track.append(
            mido.Message("note_off", channel=0, note=key, velocity=0, time=ticks)
        )
    track.append(mido.MetaMessage("end_of_track", time=0))
    midi_file = mido.MidiFile(type=1, ticks_per_beat=TICKS_PER_BEAT)
    midi_file.tracks.append(track)
    midi_file.save(str(path))
    return True


def _log2_round(value: float) -> int | None:
    if value <= 0:
        return None
    exponent = math.log2(value)
    if exponent >= 0:
        return int(math.floor(exponent + 0.5))
    return -int(math.floor(-exponent + 0.5))


def midi_to_text(data: bytes, track_no: int) -> str:
    """Turn one track of a MIDI file back into note text.

    Lengths assume 960 ticks per quarter note; a missing track gives "".
    """
    midi_file = mido.MidiFile(file=io.BytesIO(data))
    if not 0 <= track_no < len(midi_file.tracks):
        return ""
    parts: list[str] = []
    abs_ticks = 0
    start = 0.0
    end = 0.0
    start_note = 0
    end_note = 0
    for msg in midi_file.tracks[track_no]:
        abs_ticks += msg.time
        if msg.is_meta:
            continue
        sounding = msg.type == "note_on" and msg.velocity > 0
        if sounding:
            start = float(abs_ticks)
            start_note = msg.note
        if msg.type == "note_off" or (msg.type == "note_on" and msg.velocity == 0):
            end = float(abs_ticks)
            end_note = msg.note
            if start_note == end_note:
                parts.append(note_name(msg.note))
                level = msg.note // 12
                if level != DEFAULT_LEVEL:
                    parts.append(str(level))
                power = _log2_round((end - start) / TICKS_PER_BEAT)
                if power is not None and power >= -4 and power != 0:
                    parts.append(f"<{power}")
                start_note = 0
                end_note = 0
        if sounding and start > end:
            power = _log2_round((start - end) / TICKS_PER_BEAT)
            if power == 0:
                parts.append("R")
            elif power is not None and power >= -4:
                parts.append(f"R<{power}")
    return "".join(parts)


def render_wav(midi_path: str | PathLike[str]) -> Path:
    """Render a MIDI file to WAV beside it with timidity; returns the WAV path."""
    midi_path = Path(midi_path)
    wav_path = midi_path.with_suffix(".wav")
    subprocess.run(
        ["timidity", str(midi_path), "-Ow", "-o", str(wav_path)],
        check=True,
        capture_output=True,
    )
    return wav_path


def award(team: bool, error_count: int, max_errors: int) -> float:
    """Points for finishing a round of ear training.

    Alone: 1 for no mistakes, 0.5 for one, 0.2 for two, nothing after that.
    In a team: 1 unless the error limit was reached.
    """
    if team:
        return 1.0 if error_count != max_errors else 0.0
    return {0: 1.0, 1: 0.5, 2: 0.2}.get(error_count, 0.0)