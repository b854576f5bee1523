"""Remote working-directory model for WD Bridge (wdbridge)."""

from typing import List, Optional

from wdbridge.core.config import ROOT_FOLDER_ID


class PathStack:
    """
    Ordered stack of remote folder ids visited from the root.

    The top of the stack is the current folder; an empty stack means the
    root folder.
    """

    def __init__(self):
        self._stack: List[str] = []

    def __len__(self):
        return len(self._stack)

    @property
    def depth(self) -> int:
        return len(self._stack)

    def current_folder(self) -> str:
        """Return the id of the current folder."""
        if self._stack:
            return self._stack[-1]
        return ROOT_FOLDER_ID

    def enter(self, folder_id: Optional[str]) -> None:
        """Enter a child folder; a missing id is ignored."""
        if folder_id is None:
            return
        self._stack.append(folder_id)

    def enter_parent(self) -> bool:
        """Leave the current folder, returning whether anything was popped."""
        if not self._stack:
            return False
        self._stack.pop()
        return True

    def reset(self, folder_id: Optional[str]) -> None:
        """Clear the stack, then enter the given folder."""
        self._stack = []
        self.enter(folder_id)

    def truncate(self, count: int) -> None:
        """Pop up to ``count`` entries, stopping at the root."""
        for _ in range(count):
            if not self.enter_parent():
                break

    def snapshot(self) -> List[str]:
        return list(self._stack)
