# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from .editor import EditorOptions as EditorOptions
from .editor import EditorState as EditorState
from .editor import Modifiers as Modifiers
from .editor import PathEditor as PathEditor
from .errors import InvalidOperation as InvalidOperation
from .errors import ParseError as ParseError
from .errors import PathError as PathError
from .geometry import Point as Point
from .geometry import Transform as Transform
from .history import History as History
from .operations import EditResult as EditResult
from .path import Close as Close
from .path import Cubic as Cubic
from .path import Instruction as Instruction
from .path import Line as Line
from .path import Move as Move
from .path import Path as Path
from .path import Quad as Quad
from .path_parser import PathParser as PathParser
from .views import HandleRef as HandleRef
from .views import Side as Side

__version__ = "0.1.0"
