# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.


class PathError(ValueError):
    """Base class of all errors raised by :mod:`vizpath`."""


class ParseError(PathError):
    """A path string does not follow the path-instruction grammar."""


class InvalidOperation(PathError):
    """
    An operation referenced an anchor, handle or segment that is not part of
    the current path, or was requested in a state that does not allow it.

    The path is never modified when this is raised.
    """
