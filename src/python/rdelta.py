#!/usr/bin/env python3
"""
rsync-style Block Deltas

Implementation of the block-matching algorithm from:
  "The rsync algorithm"
  A. Tridgell and P. Mackerras
  Technical Report TR-CS-96-05, Australian National University, June 1996.

The old version of a stream is summarized as a signature: one weak rolling
checksum and one strong digest per full block.  The new version is scanned
once, byte by byte, against that signature; the result is an edit script of
literal runs and references to old blocks by index.  Only the signature is
needed to compute the delta; the old stream itself is never reread.

Algorithms implemented:
  - Rolling checksum (Section 3):  32-bit weak checksum, O(1) window slide
  - Signature:                    lazy per-block (weak, strong) sequence
  - Delta scan:                   lazy FILLING/MATCHING/DONE state machine

Also implements:
  - Binary signature and delta file formats
  - Delta statistics

Usage:
  python rdelta.py signature <old> <signature> [--block-size N] [--digest NAME]
  python rdelta.py delta     <signature> <new> <delta>
  python rdelta.py info      <signature-or-delta>
"""

import argparse
import hashlib
import io
import struct
import sys
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Tuple, Union


# ============================================================================
# Delta Commands
# ============================================================================

@dataclass(frozen=True)
class Raw:
    """Append literal bytes to the output."""
    data: bytes

    def __repr__(self):
        if len(self.data) <= 20:
            return f"RAW({self.data!r})"
        return f"RAW(len={len(self.data)})"


@dataclass(frozen=True)
class CopyBlock:
    """Copy old block `index`, i.e. old[index*B : index*B + B], to the output."""
    index: int

    def __repr__(self):
        return f"COPY(block={self.index})"


Command = Union[Raw, CopyBlock]


# ============================================================================
# Parameters
#
#   B  = block size, identical for the signature and every delta computed
#        against it.  The rolling checksum treats the window length as an
#        unsigned 16-bit quantity, so B must lie in [1, 65535].
#   Strong digests are injected as callables bytes -> bytes; the default is
#   MD5 (128 bits, the width rsync and rdiff use for block digests).
# ============================================================================

DEFAULT_BLOCK_SIZE = 2048
MAX_BLOCK_SIZE = 0xFFFF
READ_SIZE = 1 << 16         # new-stream read granularity for the delta scan

DIGESTS = {
    'md5': hashlib.md5,
    'sha1': hashlib.sha1,
    'sha256': hashlib.sha256,
    'blake2b': lambda data=b'': hashlib.blake2b(data, digest_size=16),
}
DEFAULT_DIGEST = 'md5'


def strong_digest(name: str = DEFAULT_DIGEST) -> Callable[[bytes], bytes]:
    """Return the digest function registered under `name` in DIGESTS."""
    try:
        ctor = DIGESTS[name]
    except KeyError:
        raise ValueError(f"unknown digest: {name!r}") from None

    def digest(data: bytes) -> bytes:
        return ctor(data).digest()
    digest.__name__ = name
    return digest


md5_digest = strong_digest('md5')


@dataclass
class DeltaOptions:
    """Options for signature and delta computation."""
    block_size: int = DEFAULT_BLOCK_SIZE
    digest: str = DEFAULT_DIGEST
    verbose: bool = False

    def digest_fn(self) -> Callable[[bytes], bytes]:
        return strong_digest(self.digest)


def _check_block_size(block_size: int) -> None:
    if not 1 <= block_size <= MAX_BLOCK_SIZE:
        raise ValueError(
            f"block size must be in [1, {MAX_BLOCK_SIZE}], got {block_size}")


# ============================================================================
# Rolling Checksum (Tridgell & Mackerras 1996, Section 3)
#
#   a(k,l) = (sum_{i=k}^{l} X_i) mod M
#   b(k,l) = (sum_{i=k}^{l} (l - i + 1) X_i) mod M
#   s(k,l) = a(k,l) + 2^16 b(k,l)                          M = 2^16
#
# Sliding the window one byte to the right:
#   a(k+1,l+1) = (a(k,l) - X_k + X_{l+1}) mod M
#   b(k+1,l+1) = (b(k,l) - (l - k + 1) X_k + a(k+1,l+1)) mod M
#
# b uses the already-updated a.  Because b weights each byte by its distance
# from the right edge, permuting bytes within a window changes the checksum.
# ============================================================================

_MASK16 = 0xFFFF


@dataclass(frozen=True)
class RollingChecksum:
    """Weak 32-bit checksum of a window: two 16-bit accumulators (a, b)."""
    a: int = 0
    b: int = 0

    @classmethod
    def from_block(cls, block) -> 'RollingChecksum':
        """Compute the checksum of `block` from scratch."""
        n = len(block)
        a = b = 0
        for i, x in enumerate(block):
            a += x
            b += ((n - i) & _MASK16) * x
        return cls(a & _MASK16, b & _MASK16)

    @classmethod
    def from_value(cls, value: int) -> 'RollingChecksum':
        """Unpack the 32-bit form b << 16 | a."""
        return cls(value & _MASK16, (value >> 16) & _MASK16)

    def update(self, slice_length: int, old_prefix: int,
               new_suffix: int) -> 'RollingChecksum':
        """Slide a window of `slice_length` bytes: drop old_prefix on the
        left, append new_suffix on the right.

        The slice length is taken modulo 2^16.
        """
        a = (self.a - old_prefix + new_suffix) & _MASK16
        b = (self.b - (slice_length & _MASK16) * old_prefix + a) & _MASK16
        return RollingChecksum(a, b)

    @property
    def value(self) -> int:
        return (self.b << 16) | self.a

    def __int__(self):
        return self.value

    def __repr__(self):
        return f"({self.b}, {self.a})"


# ============================================================================
# Fixed-size chunking
# ============================================================================

def chunks(source, block_size: int) -> Iterator[bytes]:
    """Split a binary stream into consecutive blocks of exactly block_size.

    A trailing block shorter than block_size is dropped.  Short reads are
    retried until the block is full or the stream ends; an OSError from
    source.read() propagates after every block completed before it.
    """
    _check_block_size(block_size)
    return _iter_chunks(source, block_size)


def _iter_chunks(source, block_size: int) -> Iterator[bytes]:
    while True:
        parts = []
        need = block_size
        while need:
            piece = source.read(need)
            if not piece:
                return
            parts.append(piece)
            need -= len(piece)
        yield b''.join(parts)


# ============================================================================
# Signature
# ============================================================================

@dataclass(frozen=True)
class BlockSignature:
    """Weak and strong checksum of one full block of the old stream.

    The block index is the entry's position in the signature sequence.
    """
    weak: RollingChecksum
    strong: bytes

    @classmethod
    def of(cls, block: bytes,
           digest: Callable[[bytes], bytes] = md5_digest) -> 'BlockSignature':
        return cls(RollingChecksum.from_block(block), digest(block))

    def __repr__(self):
        return f"[{self.strong.hex()} {self.weak!r}]"


def signature(source, block_size: int = DEFAULT_BLOCK_SIZE,
              digest: Callable[[bytes], bytes] = md5_digest,
              verbose: bool = False,
              opts: DeltaOptions = None) -> Iterator[BlockSignature]:
    """Lazily sign each full block of `source`, in stream order.

    Entry i describes source bytes [i*B, (i+1)*B).  Consuming the sequence
    advances the source; a read failure is raised after the entries for
    every block read before it.
    """
    if opts is not None:
        block_size, digest, verbose = (opts.block_size, opts.digest_fn(),
                                       opts.verbose)
    blocks = chunks(source, block_size)
    return _iter_signature(blocks, block_size, digest, verbose)


def _iter_signature(blocks, block_size, digest, verbose):
    count = 0
    for block in blocks:
        yield BlockSignature.of(block, digest)
        count += 1
    if verbose:
        print(f"signature: {count:,} blocks of {block_size} bytes "
              f"({count * block_size:,} bytes signed)",
              file=sys.stderr)


# ============================================================================
# Block index
#
# Maps each weak checksum to the (index, strong digest) of an old block.
# Entries are inserted in old-stream order and an equal weak checksum
# replaces the earlier entry: of several old blocks sharing a weak checksum,
# only the last one can be matched.
# ============================================================================

@dataclass(frozen=True)
class BlockInfo:
    index: int
    digest: bytes


BlockIndex = Dict[RollingChecksum, BlockInfo]


def build_index(signatures: Iterable[BlockSignature]) -> BlockIndex:
    """Index a signature sequence by weak checksum (last write wins)."""
    return {sig.weak: BlockInfo(index, sig.strong)
            for index, sig in enumerate(signatures)}


# ============================================================================
# Delta scan
#
# States:
#   FILLING   buffer shorter than B; no checksum yet
#   MATCHING  buffer >= B; checksum tracks the trailing B-byte window
#   DONE      source exhausted, final RAW emitted
#
# The buffer holds every byte not yet emitted.  It is cleared only when the
# trailing window's strong digest matches an indexed block, so each run of
# unmatched bytes leaves as a single RAW.  A weak hit whose strong digest
# differs is ignored and the scan rolls on.
# ============================================================================

FILLING = 'filling'
MATCHING = 'matching'
DONE = 'done'

_NOTHING: Tuple[Command, ...] = ()


class _Scanner:
    """Mutable state of one delta scan: buffer, checksum and counters."""
    __slots__ = ('index', 'block_size', 'digest', 'state', 'buf', 'weak',
                 'scanned', 'weak_hits', 'false_hits', 'copies', 'raws',
                 'raw_bytes')

    def __init__(self, index: BlockIndex, block_size: int,
                 digest: Callable[[bytes], bytes]):
        self.index = index
        self.block_size = block_size
        self.digest = digest
        self.state = FILLING
        self.buf = bytearray()
        self.weak = None
        self.scanned = 0
        self.weak_hits = 0
        self.false_hits = 0
        self.copies = 0
        self.raws = 0
        self.raw_bytes = 0

    def push(self, byte: int) -> Tuple[Command, ...]:
        """Consume one byte; return the commands it completes."""
        if self.state == DONE:
            raise ValueError("scan already finished")
        buf = self.buf
        buf.append(byte)
        self.scanned += 1
        n = len(buf)
        p = self.block_size
        if self.state == FILLING:
            if n < p:
                return _NOTHING
            self.weak = RollingChecksum.from_block(buf)
            self.state = MATCHING
        else:
            self.weak = self.weak.update(p, buf[n - p - 1], byte)

        info = self.index.get(self.weak)
        if info is None:
            return _NOTHING
        self.weak_hits += 1
        block_begin = n - p
        if self.digest(bytes(buf[block_begin:])) != info.digest:
            self.false_hits += 1
            return _NOTHING

        self.copies += 1
        self.weak = None
        self.state = FILLING
        if block_begin > 0:
            raw = self._take(block_begin)
            self.buf = bytearray()
            return raw, CopyBlock(info.index)
        self.buf = bytearray()
        return (CopyBlock(info.index),)

    def finish(self) -> Raw:
        """Flush the buffer as the terminal RAW (possibly empty)."""
        if self.state == DONE:
            raise ValueError("scan already finished")
        raw = self._take(len(self.buf))
        self.buf = bytearray()
        self.weak = None
        self.state = DONE
        return raw

    def _take(self, n: int) -> Raw:
        self.raws += 1
        self.raw_bytes += n
        return Raw(bytes(self.buf[:n]))


def diff(signatures: Iterable[BlockSignature], new_source,
         block_size: int = DEFAULT_BLOCK_SIZE,
         digest: Callable[[bytes], bytes] = md5_digest,
         verbose: bool = False,
         opts: DeltaOptions = None) -> Iterator[Command]:
    """Compute the delta of `new_source` against a signature sequence.

    The signature is indexed eagerly; commands are produced lazily.  See
    diff_indexed().
    """
    return diff_indexed(build_index(signatures), new_source,
                        block_size=block_size, digest=digest,
                        verbose=verbose, opts=opts)


def diff_indexed(index: BlockIndex, new_source,
                 block_size: int = DEFAULT_BLOCK_SIZE,
                 digest: Callable[[bytes], bytes] = md5_digest,
                 verbose: bool = False,
                 opts: DeltaOptions = None) -> Iterator[Command]:
    """Scan `new_source` once against a prebuilt block index.

    Yields RAW and COPY commands in new-stream order and always ends with a
    RAW holding the unmatched tail, even when it is empty.  An OSError from
    new_source.read() is raised after the commands already produced.  The
    index is only read, so it may back any number of scans.
    """
    if opts is not None:
        block_size, digest, verbose = (opts.block_size, opts.digest_fn(),
                                       opts.verbose)
    _check_block_size(block_size)
    return _scan(index, new_source, block_size, digest, verbose)


def _scan(index, new_source, block_size, digest, verbose):
    scanner = _Scanner(index, block_size, digest)
    if verbose:
        print(f"delta: {len(index):,} indexed blocks, block_size={block_size}",
              file=sys.stderr)
    while True:
        data = new_source.read(READ_SIZE)
        if not data:
            break
        for byte in data:
            yield from scanner.push(byte)

    tail = scanner.finish()
    if verbose:
        hit_pct = (scanner.copies / scanner.weak_hits * 100
                   if scanner.weak_hits else 0)
        print(f"  scan: {scanner.scanned:,} bytes, {scanner.weak_hits:,} weak "
              f"hits, {scanner.false_hits:,} strong mismatches\n"
              f"  scan: hit rate {hit_pct:.1f}% (of weak hits)",
              file=sys.stderr)
        _print_command_stats({
            'num_copies': scanner.copies,
            'num_raws': scanner.raws,
            'copy_bytes': scanner.copies * block_size,
            'raw_bytes': scanner.raw_bytes,
        })
    yield tail


# ============================================================================
# Statistics
# ============================================================================

def delta_summary(commands: Iterable[Command], block_size: int) -> dict:
    """Return summary statistics for a command sequence (single pass)."""
    num_commands = num_copies = num_raws = raw_bytes = 0
    for cmd in commands:
        num_commands += 1
        if isinstance(cmd, CopyBlock):
            num_copies += 1
        else:
            num_raws += 1
            raw_bytes += len(cmd.data)
    copy_bytes = num_copies * block_size
    return {
        'num_commands': num_commands,
        'num_copies': num_copies,
        'num_raws': num_raws,
        'copy_bytes': copy_bytes,
        'raw_bytes': raw_bytes,
        'total_output_bytes': copy_bytes + raw_bytes,
    }


def _print_command_stats(stats: dict) -> None:
    """Print verbose statistics for delta output."""
    total_out = stats['copy_bytes'] + stats['raw_bytes']
    copy_pct = stats['copy_bytes'] / total_out * 100 if total_out else 0
    print(f"  result: {stats['num_copies']} copies ({stats['copy_bytes']} bytes), "
          f"{stats['num_raws']} raws ({stats['raw_bytes']} bytes)\n"
          f"  result: copy coverage {copy_pct:.1f}%, output {total_out} bytes",
          file=sys.stderr)


# ============================================================================
# Binary Signature Format
#
# Header:
#   Magic:        4 bytes  b'RSG\x01'
#   Digest id:    1 byte   (see SIG_DIGEST_IDS)
#   Digest size:  1 byte
#   Block size:   4 bytes  uint32 BE
#
# Entries (old-stream order, until end of data):
#   weak:u32 BE (b << 16 | a), strong:<digest size> bytes
# ============================================================================

SIG_MAGIC = b'RSG\x01'
SIG_HEADER_SIZE = 10    # magic(4) + digest id(1) + digest size(1) + block size(4)
SIG_WEAK_SIZE = 4
SIG_DIGEST_IDS = {'md5': 1, 'sha1': 2, 'sha256': 3, 'blake2b': 4}
_SIG_DIGEST_NAMES = {v: k for k, v in SIG_DIGEST_IDS.items()}


def write_signature(out, signatures: Iterable[BlockSignature],
                    block_size: int, digest_name: str = DEFAULT_DIGEST) -> int:
    """Stream a signature sequence to a binary file; return the entry count."""
    if digest_name not in SIG_DIGEST_IDS:
        raise ValueError(f"unknown digest: {digest_name!r}")
    digest_size = DIGESTS[digest_name]().digest_size
    out.write(SIG_MAGIC)
    out.write(struct.pack('>BBI', SIG_DIGEST_IDS[digest_name], digest_size,
                          block_size))
    count = 0
    for sig in signatures:
        if len(sig.strong) != digest_size:
            raise ValueError(f"strong digest is {len(sig.strong)} bytes, "
                             f"expected {digest_size}")
        out.write(struct.pack('>I', sig.weak.value))
        out.write(sig.strong)
        count += 1
    return count


def encode_signature(signatures: Iterable[BlockSignature], block_size: int,
                     digest_name: str = DEFAULT_DIGEST) -> bytes:
    out = io.BytesIO()
    write_signature(out, signatures, block_size, digest_name)
    return out.getvalue()


def decode_signature(data: bytes):
    """Decode a binary signature.

    Returns (signatures, block_size, digest_name).
    """
    if len(data) < SIG_HEADER_SIZE or data[:len(SIG_MAGIC)] != SIG_MAGIC:
        raise ValueError("Not a signature file")
    digest_id, digest_size, block_size = struct.unpack_from(
        '>BBI', data, len(SIG_MAGIC))
    if digest_id not in _SIG_DIGEST_NAMES:
        raise ValueError(f"unknown digest id {digest_id}")
    digest_name = _SIG_DIGEST_NAMES[digest_id]
    expected = DIGESTS[digest_name]().digest_size
    if digest_size != expected:
        raise ValueError(f"{digest_name} digests are {expected} bytes, "
                         f"header says {digest_size}")
    entry_size = SIG_WEAK_SIZE + digest_size
    body = len(data) - SIG_HEADER_SIZE
    if body % entry_size:
        raise ValueError("Truncated signature file")

    signatures: List[BlockSignature] = []
    for pos in range(SIG_HEADER_SIZE, len(data), entry_size):
        weak = struct.unpack_from('>I', data, pos)[0]
        strong = bytes(data[pos + SIG_WEAK_SIZE:pos + entry_size])
        signatures.append(BlockSignature(RollingChecksum.from_value(weak),
                                         strong))
    return signatures, block_size, digest_name


def read_signature(f):
    """Read and decode a whole binary signature file object."""
    return decode_signature(f.read())


# ============================================================================
# Binary Delta Format
#
# Header:
#   Magic:        4 bytes  b'RDL\x01'
#   Block size:   4 bytes  uint32 BE
#
# Commands (in order):
#   END:  type=0                     (1 byte)
#   COPY: type=1, index:u32          (5 bytes)
#   RAW:  type=2, len:u32, data      (5 + len bytes)
# ============================================================================

DELTA_MAGIC = b'RDL\x01'
DELTA_HEADER_SIZE = 8   # magic(4) + block size(4)
DELTA_CMD_END = 0
DELTA_CMD_COPY = 1
DELTA_CMD_RAW = 2
DELTA_U32_SIZE = 4
DELTA_U32_MAX = 0xFFFFFFFF


def write_delta(out, commands: Iterable[Command], block_size: int) -> dict:
    """Stream commands to a binary delta file; return delta_summary()."""
    out.write(DELTA_MAGIC)
    out.write(struct.pack('>I', block_size))
    stats = delta_summary(_write_commands(out, commands), block_size)
    out.write(bytes([DELTA_CMD_END]))
    return stats


def _write_commands(out, commands):
    for cmd in commands:
        if isinstance(cmd, CopyBlock):
            if not 0 <= cmd.index <= DELTA_U32_MAX:
                raise ValueError(f"block index {cmd.index} does not fit "
                                 f"in a u32")
            out.write(struct.pack('>BI', DELTA_CMD_COPY, cmd.index))
        elif isinstance(cmd, Raw):
            if len(cmd.data) > DELTA_U32_MAX:
                raise ValueError(f"raw run of {len(cmd.data)} bytes does not "
                                 f"fit in a u32 length")
            out.write(struct.pack('>BI', DELTA_CMD_RAW, len(cmd.data)))
            out.write(cmd.data)
        yield cmd


def encode_delta(commands: Iterable[Command], block_size: int) -> bytes:
    out = io.BytesIO()
    write_delta(out, commands, block_size)
    return out.getvalue()


def decode_delta(data: bytes):
    """Decode a binary delta.

    Returns (commands, block_size).
    """
    if len(data) < DELTA_HEADER_SIZE or data[:len(DELTA_MAGIC)] != DELTA_MAGIC:
        raise ValueError("Not a delta file")
    block_size = struct.unpack_from('>I', data, len(DELTA_MAGIC))[0]
    pos = DELTA_HEADER_SIZE
    commands: List[Command] = []

    while pos < len(data):
        t = data[pos]
        pos += 1
        if t == DELTA_CMD_END:
            break
        if pos + DELTA_U32_SIZE > len(data):
            raise ValueError("Truncated delta file")
        value = struct.unpack_from('>I', data, pos)[0]
        pos += DELTA_U32_SIZE
        if t == DELTA_CMD_COPY:
            commands.append(CopyBlock(value))
        elif t == DELTA_CMD_RAW:
            if pos + value > len(data):
                raise ValueError("Truncated delta file")
            commands.append(Raw(bytes(data[pos:pos + value])))
            pos += value
        else:
            raise ValueError(f"unknown delta command type {t}")

    return commands, block_size


def read_delta(f):
    """Read and decode a whole binary delta file object."""
    return decode_delta(f.read())


# ============================================================================
# CLI
# ============================================================================

def cmd_signature(args):
    if not 1 <= args.block_size <= MAX_BLOCK_SIZE:
        raise SystemExit(
            f"error: --block-size must be in [1, {MAX_BLOCK_SIZE}]")
    opts = DeltaOptions(block_size=args.block_size, digest=args.digest,
                        verbose=args.verbose)

    t0 = time.time()
    with open(args.old, 'rb') as src, open(args.signature, 'wb') as out:
        count = write_signature(out, signature(src, opts=opts),
                                opts.block_size, opts.digest)
        sig_size = out.tell()
    elapsed = time.time() - t0

    print(f"Old:          {args.old}")
    print(f"Signature:    {args.signature} ({sig_size:,} bytes)")
    print(f"Block size:   {opts.block_size}")
    print(f"Digest:       {opts.digest}")
    print(f"Blocks:       {count:,}")
    print(f"Time:         {elapsed:.3f}s")


def cmd_delta(args):
    with open(args.signature, 'rb') as f:
        signatures, block_size, digest_name = read_signature(f)
    if not 1 <= block_size <= MAX_BLOCK_SIZE:
        raise SystemExit(
            f"error: {args.signature}: block size {block_size} is not in "
            f"[1, {MAX_BLOCK_SIZE}]")
    opts = DeltaOptions(block_size=block_size, digest=digest_name,
                        verbose=args.verbose)

    t0 = time.time()
    index = build_index(signatures)
    with open(args.new, 'rb') as src, open(args.delta, 'wb') as out:
        stats = write_delta(out, diff_indexed(index, src, opts=opts),
                            block_size)
        delta_size = out.tell()
    elapsed = time.time() - t0

    new_size = stats['total_output_bytes']
    ratio = delta_size / new_size if new_size else 0
    print(f"Signature:    {args.signature} ({len(signatures):,} blocks, "
          f"{digest_name})")
    print(f"New:          {args.new} ({new_size:,} bytes)")
    print(f"Delta:        {args.delta} ({delta_size:,} bytes)")
    print(f"Compression:  {ratio:.4f} (delta/new)")
    print(f"Block size:   {block_size}")
    print(f"Commands:     {stats['num_copies']} copies, {stats['num_raws']} raws")
    print(f"Copy bytes:   {stats['copy_bytes']:,}")
    print(f"Raw bytes:    {stats['raw_bytes']:,}")
    print(f"Time:         {elapsed:.3f}s")


def cmd_info(args):
    with open(args.file, 'rb') as f:
        data = f.read()

    if data[:len(SIG_MAGIC)] == SIG_MAGIC:
        signatures, block_size, digest_name = decode_signature(data)
        distinct = len(build_index(signatures))
        print(f"Signature:    {args.file} ({len(data):,} bytes)")
        print(f"Block size:   {block_size}")
        print(f"Digest:       {digest_name}")
        print(f"Blocks:       {len(signatures):,} "
              f"({distinct:,} distinct weak checksums)")
        print(f"Signed bytes: {len(signatures) * block_size:,}")
    elif data[:len(DELTA_MAGIC)] == DELTA_MAGIC:
        commands, block_size = decode_delta(data)
        stats = delta_summary(commands, block_size)
        print(f"Delta file:   {args.file} ({len(data):,} bytes)")
        print(f"Block size:   {block_size}")
        print(f"Commands:     {stats['num_commands']}")
        print(f"  Copies:     {stats['num_copies']} ({stats['copy_bytes']:,} bytes)")
        print(f"  Raws:       {stats['num_raws']} ({stats['raw_bytes']:,} bytes)")
        print(f"Output size:  {stats['total_output_bytes']:,} bytes")
    else:
        raise SystemExit(f"error: {args.file} is not a signature or delta file")


def main(argv=None):
    ap = argparse.ArgumentParser(
        description='rsync-style block signatures and deltas')
    sub = ap.add_subparsers(dest='command')

    # signature
    sig = sub.add_parser('signature', help='Compute the signature of a file')
    sig.add_argument('old', help='Old (basis) file')
    sig.add_argument('signature', help='Output signature file')
    sig.add_argument('--block-size', type=int, default=DEFAULT_BLOCK_SIZE,
                     help=f'Block size in bytes (default: {DEFAULT_BLOCK_SIZE})')
    sig.add_argument('--digest', choices=list(SIG_DIGEST_IDS),
                     default=DEFAULT_DIGEST,
                     help=f'Strong digest (default: {DEFAULT_DIGEST})')
    sig.add_argument('--verbose', action='store_true',
                     help='Print diagnostic messages to stderr')
    sig.set_defaults(func=cmd_signature)

    # delta
    dlt = sub.add_parser('delta', help='Compute a delta against a signature')
    dlt.add_argument('signature', help='Signature of the old file')
    dlt.add_argument('new', help='New file')
    dlt.add_argument('delta', help='Output delta file')
    dlt.add_argument('--verbose', action='store_true',
                     help='Print diagnostic messages to stderr')
    dlt.set_defaults(func=cmd_delta)

    # info
    inf = sub.add_parser('info', help='Show signature or delta file statistics')
    inf.add_argument('file', help='Signature or delta file')
    inf.set_defaults(func=cmd_info)

    args = ap.parse_args(argv)
    if args.command is None:
        ap.print_help()
        sys.exit(1)
    args.func(args)


# ============================================================================

if __name__ == '__main__':
    main()
