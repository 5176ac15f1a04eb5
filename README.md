# shair

Send files to other machines on your local network from the terminal.

shair announces your machine over multicast DNS as a `_shair._tcp` service. It lists the
other peers that announce the same service and sends files to them over a direct TCP
connection. Each incoming transfer must be accepted or rejected by the receiver before
any file data is sent.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Usage

Start the interface:

```
shair
```

Options:

- `--port PORT`: the TCP port on which transfers are accepted and which is announced over
  mDNS (default `8085`).
- `--save-dir DIR`: where received files are saved (default: your home directory).

Your machine is announced under its hostname. Peers announced under that same hostname
are not listed.

### Peer list

The first screen lists every discovered peer with its name, the network it was found on,
its IP address and its port.

- `k` / `up` / `ctrl+p` and `j` / `down` / `ctrl+n` move the cursor.
- `enter` picks the selected peer as the destination.
- `esc` quits.

When a peer wants to send you files, the footer shows
`(y/n) <name> wants to transfer <n> files`. Press `y` to accept or `n` to reject. After
you accept, a page lists the incoming files and their sizes until the transfer ends.

### Picking files

After you pick a destination, type one file path per line (`enter` starts a new line,
`backspace` deletes) and press `tab` to send. If a path does not exist or points to a
directory, the footer lists it and nothing is sent. While sending, a page lists the files
and their sizes.

After a transfer you are back on the peer list, and the footer shows the outcome:

- `transfer done` when sending succeeded;
- `<name> didn't accept the files` when the receiver rejected the transfer;
- the error message when sending failed for another reason;
- `files received` or `transfer incomplete` after receiving, depending on whether the
  number of bytes received matches the total announced by the sender.

Received files are saved under their base name in the save directory, replacing any file
of the same name.

## Using it as a library

The backend can be used without the interface:

```python
import queue
import threading

from shair.app import Application
from shair.local.shairer import LocalShairer

app = Application("my-laptop", "/tmp/inbox", LocalShairer(port=8085))
peer_updates = queue.Queue()
transfer_requests = queue.Queue()
threading.Thread(
    target=app.start, args=(peer_updates, transfer_requests), daemon=True
).start()

update = peer_updates.get()  # a PeerUpdate holding a Device and a PeerStatus
```

- Each `PeerUpdate` on `peer_updates` has a `peer` (`shair.model.Device`) and a
  `status` (`PeerStatus.DISCOVERED` or `PeerStatus.REMOVED`). A removal carries the
  same `Device` object as the discovery.
- Each `TransferRequest` on `transfer_requests` has the `sender`, the list of
  `FilePreview` (name and size), an `accept` queue on which to put `True` or `False`,
  and a `progress` queue that receives byte counts and then `None` when the transfer
  has ended.
- `Application.send_files(cancel, target, progress, filepaths)` sends files to a
  discovered `Device`. `cancel` is a `threading.Event` that stops the transfer when set.
  Byte counts go to `progress`, followed by `None` once every file has been sent. On
  failure it raises `shair.errors.ShairError`, whose `code` (an `ErrorCode`) tells
  whether a file could not be opened (`STAT_FILE`), the receiver rejected the transfer
  (`TRANSFER_REJECTED`), sending failed (`SEND_FILE`) or something else went wrong
  (`UNEXPECTED`).
- `Application.stop()` stops discovery and the server and waits for them.

Lower-level pieces live in `shair.local`: `header` (the transfer header), `mdns`
(building and parsing announcements, `announce_service`, `browse`), `send` (`Sender`)
and `server` (`serve`, `handle_request`).

## Wire format

Before any file data, a sender writes a header with these fields, in this order:

- the total header size, as a big-endian 16-bit integer;
- the number of files, as a big-endian 16-bit integer;
- one byte per file, giving the byte length of its name (at most 255);
- the file names themselves, in UTF-8;
- each file's size, as a zig-zag varint.

The receiver answers with a single byte: `1` to accept or `0` to reject. If it accepts,
the file contents follow one after another and the sender closes the connection.

## Limitations

- Only regular files can be sent; directories are refused.
- The transfer pages list the files but show no progress bar.
- The server handles one transfer at a time; others wait until it is done.
- Discovery uses IPv4 multicast on UDP port 5353 and announces a single local address.
- Peers are only found on the local network; there is no Bluetooth or remote transport.
- Key presses are read one by one only on a POSIX terminal; elsewhere input is read as it
  arrives from standard input.