from typing import Dict, List, Optional, Tuple

from docthis.comments import (
    ExistingComment,
    ParsedComment,
    TagKey,
    param_root,
    tag_key,
)
from docthis.logger import logger
from docthis.models import CommentBlock, EditOperation, Position, TagLine
from docthis.renderer import TAG_RANKS

# sort key: (rank, sub-position, group, sequence)
_SortKey = Tuple[int, int, int, int]

_GROUP_RENDERED = 0
_GROUP_EXISTING = 1
_GROUP_FOLLOWER = 2

_STALE_TAGS = ("param", "template")


class CommentPlanner:
    """
    Decides where a rendered block goes and how it is reconciled with a
    block already present above the node.
    """

    def __init__(self, remove_stale: bool = True) -> None:
        self.remove_stale = remove_stale

    def plan(
        self,
        anchor_line: int,
        block: CommentBlock,
        existing: Optional[ExistingComment] = None,
    ) -> List[EditOperation]:
        if existing is None:
            text = block.to_text() + block.eol
            return [EditOperation.insert(Position(anchor_line, 0), text)]

        if existing.parsed is None:
            logger.warning(
                "Existing comment is malformed; replacing it",
                first_line=existing.first_line + 1,
                last_line=existing.last_line + 1,
            )
            return [EditOperation.replace(existing.range, block.to_text())]

        merged = self.merge(block, existing.parsed)
        new_lines = merged.lines()
        if new_lines == existing.lines:
            logger.debug("Comment already up to date", line=existing.first_line + 1)
            return []
        return [EditOperation.replace(existing.range, block.eol.join(new_lines))]

    def merge(self, block: CommentBlock, old: ParsedComment) -> CommentBlock:
        """
        Reconcile the freshly rendered *block* with the *old* comment. Old
        description text and old tag bodies win; stale `@param`/`@template`
        tags are dropped; new tags are added at their canonical position.
        """
        params = self._index(block.tags, "param")
        templates = self._index(block.tags, "template")
        index = {"param": params, "template": templates}

        old_by_key: Dict[TagKey, List[int]] = {}
        for i, tag in enumerate(old.tags):
            old_by_key.setdefault(tag_key(tag), []).append(i)

        entries: List[Tuple[_SortKey, TagLine]] = []
        used: set[int] = set()
        for seq, tag in enumerate(block.tags):
            key = tag_key(tag)
            if key == ("description", None) and old.description:
                continue
            chosen = next((i for i in old_by_key.get(key, []) if i not in used), None)
            line = tag
            if chosen is not None:
                used.add(chosen)
                line = old.tags[chosen]
            rank, sub = self._position(key, index)
            entries.append(((rank, sub, _GROUP_RENDERED, seq), line))

        # unranked tags stay behind the tag they used to follow
        follow: Tuple[int, int] = (-1, 0)
        for i, tag in enumerate(old.tags):
            key = tag_key(tag)
            if key[0] not in TAG_RANKS:
                entries.append(((follow[0], follow[1], _GROUP_FOLLOWER, i), tag))
                continue
            follow = self._position(key, index)
            if i in used:
                continue
            if self._is_stale(key, index):
                logger.debug("Dropping stale tag", tag=tag.tag, body=tag.body)
                continue
            entries.append(((follow[0], follow[1], _GROUP_EXISTING, i), tag))

        entries.sort(key=lambda e: e[0])
        return CommentBlock(
            indent=block.indent,
            description=list(old.description) or list(block.description),
            tags=[line for _, line in entries],
            eol=block.eol,
        )

    # --- helpers ----------------------------------------------------
    def _index(self, tags: List[TagLine], name: str) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for tag in tags:
            key = tag_key(tag)
            if key[0] == name and key[1] and key[1] not in out:
                out[key[1]] = len(out)
        return out

    def _position(
        self, key: TagKey, index: Dict[str, Dict[str, int]]
    ) -> Tuple[int, int]:
        name, referent = key
        rank = TAG_RANKS[name]
        names = index.get(name)
        if names is None:
            return rank, 0
        root = param_root(referent) if referent and name == "param" else referent
        return rank, names.get(root or "", len(names))

    def _is_stale(self, key: TagKey, index: Dict[str, Dict[str, int]]) -> bool:
        name, referent = key
        if not self.remove_stale or name not in _STALE_TAGS or not referent:
            return False
        root = param_root(referent) if name == "param" else referent
        return root not in index[name]

