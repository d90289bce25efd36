# lc3_core_tracer/loader/loader.py
"""
プログラムローダーモジュール。
LC-3オブジェクトイメージ（ビッグエンディアンのバイナリ）、16進テキストイメージ、
およびアセンブラが出力するシンボルテーブル(.sym)の読み込みをサポートします。
"""
import os
import re
from dataclasses import dataclass
from typing import List, Optional

from lc3_core_tracer.common.errors import ImageError, ImageNotFound, ImageTooLarge, ImageTruncated
from lc3_core_tracer.common.types import SymbolMap
from lc3_core_tracer.transport.bus import Bus, ADDRESS_SPACE_SIZE

# @intent:data_structure ロード結果（開始アドレスとワード列）を記録します。
@dataclass(frozen=True)
class LoadedImage:
    origin: int
    words: List[int]
    path: Optional[str] = None

    @property
    def end(self) -> int:
        """最後にロードされたワードの次のアドレス。"""
        return self.origin + len(self.words)


# @intent:utility_function ワード列がアドレス空間に収まることを検証してからバスへ書き込みます。
# @intent:rationale 検証はメモリへの書き込み前に完了させ、失敗時にメモリを部分的に変更しないようにします。
def _place_words(origin: int, words: List[int], bus: Bus, path: Optional[str]) -> LoadedImage:
    if origin + len(words) > ADDRESS_SPACE_SIZE:
        raise ImageTooLarge(
            f"Image of {len(words)} words at origin {origin:#06x} overflows address 0xFFFF.", path
        )
    for i, word in enumerate(words):
        bus.load(origin + i, word)
    return LoadedImage(origin=origin, words=words, path=path)


def _read_file(path: str, mode: str, encoding: Optional[str] = None):
    try:
        with open(path, mode, encoding=encoding) as f:
            return f.read()
    except FileNotFoundError:
        raise ImageNotFound("Image file not found.", path) from None
    except IsADirectoryError:
        raise ImageNotFound("Image path is a directory.", path) from None
    except UnicodeDecodeError as e:
        raise ImageTruncated(f"Text image is not valid UTF-8 (byte {e.start}).", path) from None
    except OSError as e:
        raise ImageError(f"Cannot read image: {e.strerror or e}", path) from e


class ObjectImageLoader:
    """
    LC-3オブジェクトファイル(.obj)を解析し、データをバスにロードするローダー。
    先頭2バイトがロードアドレス、以降の2バイトごとが連続するワード（いずれもビッグエンディアン）です。
    """
    def load_image(self, file_path: str, bus: Bus) -> LoadedImage:
        data = _read_file(file_path, "rb")
        return self.load_image_bytes(data, bus, file_path)

    def load_image_bytes(self, data: bytes, bus: Bus, file_path: Optional[str] = None) -> LoadedImage:
        if len(data) < 2:
            raise ImageTruncated("Image is missing its 16-bit origin header.", file_path)
        if len(data) % 2 != 0:
            raise ImageTruncated(f"Image has an odd byte count ({len(data)}).", file_path)

        origin = (data[0] << 8) | data[1]
        words = [(data[i] << 8) | data[i + 1] for i in range(2, len(data), 2)]
        return _place_words(origin, words, bus, file_path)


class HexImageLoader:
    """
    1行に4桁の16進ワードを記述したテキストイメージを解析します。
    最初のワードがロードアドレスです。空行と ';' 以降のコメントは無視します。
    """
    _WORD_PATTERN = re.compile(r"^(?:0x|x)?([0-9A-Fa-f]{1,4})$")

    def load_hex(self, file_path: str, bus: Bus) -> LoadedImage:
        text = _read_file(file_path, "r", "utf-8")
        return self.load_hex_text(text, bus, file_path)

    def load_hex_text(self, text: str, bus: Bus, file_path: Optional[str] = None) -> LoadedImage:
        values = []
        for line_num, line in enumerate(text.splitlines(), 1):
            line = line.split(';', 1)[0].strip()
            if not line:
                continue
            match = self._WORD_PATTERN.match(line)
            if not match:
                raise ImageTruncated(f"Invalid hex word on line {line_num}: {line}", file_path)
            values.append(int(match.group(1), 16))

        if not values:
            raise ImageTruncated("Image is missing its 16-bit origin header.", file_path)
        return _place_words(values[0], values[1:], bus, file_path)


class SymbolTableLoader:
    """
    LC-3アセンブラが出力するシンボルテーブル(.sym)を解析します。

    //	Symbol Name       Page Address
    //	----------------  ------------
    //	START             3000
    """
    _ROW_PATTERN = re.compile(r"^//\s*([A-Za-z_][\w.]*)\s+(?:x)?([0-9A-Fa-f]{1,4})\s*$")

    def load_symbols(self, file_path: str) -> SymbolMap:
        text = _read_file(file_path, "r", "utf-8")
        return self.parse_symbols(text)

    def parse_symbols(self, text: str) -> SymbolMap:
        symbol_map: SymbolMap = {}
        for line in text.splitlines():
            match = self._ROW_PATTERN.match(line.strip())
            if match:
                symbol_map[match.group(1)] = int(match.group(2), 16)
        return symbol_map


# @intent:responsibility 拡張子に応じてローダーを選択し、プログラムをロードします。
def load_program(file_path: str, bus: Bus) -> LoadedImage:
    extension = os.path.splitext(file_path)[1].lower()
    if extension == ".hex":
        return HexImageLoader().load_hex(file_path, bus)
    return ObjectImageLoader().load_image(file_path, bus)
