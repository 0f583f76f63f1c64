# botplugins

Self-contained pieces for group chat-bot plugins. This package does not include a
chat transport. You pass in the command text you have already parsed, and you send
the replies yourself. `Clock`, for example, sends each reminder through a `sender`
callable that you provide.

## Installation

```
pip install botplugins
pip install "botplugins[test]"   # adds pytest
```

`botplugins.midi.render_wav` runs the external `timidity` program. It must be on your `PATH`.

## Modules

| Module | What it does |
| --- | --- |
| `botplugins.timer` | `Timer` packs a reminder's enabled flag, month, day, weekday, hour and minute into one integer. A field whose value is -1 means "every". `info()` returns the canonical schedule text, and `timer_id()` returns a stable id derived from it. |
| `botplugins.parse` | Builds timers from the pieces of a Chinese date command with `filled_timer`, or from a cron expression with `filled_cron_timer`. `chinese_num_to_int` and `chinese_char_to_int` convert the numbers. When a field is invalid, the timer stays disabled and the reason is stored in `alert`. |
| `botplugins.schedule` | `next_wake_time(timer, now)` gives the next moment to check a date-based timer. `is_due(timer, now)` says whether the timer fires at that moment. `first_weekday` is a helper for both. |
| `botplugins.clock` | `Clock(db_path, sender)` stores timers in SQLite and runs each one in a background thread. It accepts date-based timers and standard five-field cron timers. Methods: `register`, `cancel`, `get`, `list_timers` and `close`. `alert_message` builds the message segments that are sent. |
| `botplugins.hyaku` | `load_poems` reads the CSV of the hundred Ogura Hyakunin Isshu poems, which must have a title row. `Poem` formats one poem. `image_names(n)` returns the two picture names for poem `n`. |
| `botplugins.jandan` | `PictureStore` is a SQLite table of picture URLs keyed by their CRC-64/ISO checksum. It provides `add`, `contains`, `count` and `random_url`. `crc64_iso` and `picture_id` compute the keys. |
| `botplugins.heisi` | `load_items` splits a data file into 10-byte `PicItem` records, and `PicItem.url()` decodes a record into its URL. `choose_url` picks a random URL for one of the picture commands. |
| `botplugins.midi` | `make_midi` converts note text such as `CCGGAAGR` into a MIDI file, and `midi_to_text` reads a track back into note text. `process_one`, `octave` and `note_name` handle single notes. `award` scores an ear-training round. `render_wav` runs `timidity`. |
| `botplugins.config` | `Config` holds the JSON settings of a music quiz. It provides `load`, `save` and `default_list_for`. `default_config(bot_path)` returns the first-run defaults. |
| `botplugins.library` | Manages the quiz's playlist folders: `list_playlists`, `create_playlist`, `delete_playlist`, `unbind_playlist` and `set_default_list`. It also has `normalize_music_path` and `is_supported_music`. |

## Example: a weekly reminder

```python
from datetime import datetime
from botplugins.parse import filled_timer
from botplugins.schedule import next_wake_time

# groups: (whole match), month, day/week, hour, minute, url, alert
t = filled_timer(["", "12", "周三", "8", "30", "", "standup"], 0, 123, False)
print(t.enabled, t.info())
print(next_wake_time(t, datetime.now()))
```

## Example: running reminders

```python
from botplugins.clock import Clock
from botplugins.parse import filled_cron_timer

def send(self_id, group_id, segments):
    print(group_id, segments)

with Clock("timers.db", send) as clock:
    timer = filled_cron_timer("0 9 * * 1", "weekly meeting", "", 0, 123)
    if clock.register(timer, save=True):
        print(clock.list_timers(123))
```

## Example: note text to MIDI and back

```python
from botplugins.midi import make_midi, midi_to_text

make_midi("song.mid", "CCGGAAGR FFEEDDCR", 40)
with open("song.mid", "rb") as fh:
    print(midi_to_text(fh.read(), 0))
```

## Example: a picture store

```python
from botplugins.jandan import PictureStore

with PictureStore("pics.db") as store:
    store.add("https://example.com/a.jpg")
    print(store.count(), store.random_url())
```

## What this package does not do

* It does not connect to any chat service, register commands or run a bot.
* Picture URLs are not downloaded, and nothing is fetched from online music, playlist or holiday services.
* The music quiz is covered only by its settings (`botplugins.config`) and its playlist folders (`botplugins.library`). Playing a round, picking songs and cutting audio clips are not included.
* It has no holiday countdown or daily reminder message.