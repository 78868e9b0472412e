###########################################################################
###########################################################################
## A disjoint-set data structure and union-find algorithm.               ##
##                                                                       ##
## Copyright (C)  2022  Oliver Michael Kamperis                          ##
## Email: o.m.kamperis@gmail.com                                         ##
##                                                                       ##
## This program is free software: you can redistribute it and/or modify  ##
## it under the terms of the GNU General Public License as published by  ##
## the Free Software Foundation, either version 3 of the License, or     ##
## any later version.                                                    ##
##                                                                       ##
## This program is distributed in the hope that it will be useful,       ##
## but WITHOUT ANY WARRANTY; without even the implied warranty of        ##
## MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the          ##
## GNU General Public License for more details.                          ##
##                                                                       ##
## You should have received a copy of the GNU General Public License     ##
## along with this program. If not, see <https://www.gnu.org/licenses/>. ##
###########################################################################
###########################################################################

"""
Module containing a disjoint-set data structure over a fixed range of integer
elements, whose sub-sets carry properties that are combined on every union.
"""

import copy
import dataclasses
import enum
import logging
from typing import (Any, Callable, Generic, Iterable, Iterator, Literal,
                    Optional, TypeAlias, TypeVar)

import numpy as np
import numpy.typing as npt

__copyright__ = "Copyright (C) 2022 Oliver Michael Kamperis"
__license__ = "GPL-3.0"

__all__ = (
    "DisjointSet",
    "ElementIndexError",
    "FindMethod",
    "FixedProps",
    "PerIndexProps"
)


def __dir__() -> tuple[str, ...]:
    """Get the names of module attributes."""
    return __all__


FindMethodNames: TypeAlias = Literal[
    "loop_compress",
    "recurse_compress",
    "path_split",
    "path_halve"
]


# Sub-set properties and edge properties generic types.
SP = TypeVar("SP")
EP = TypeVar("EP")


class ElementIndexError(IndexError):
    """Raised when an element is not in the range of a disjoint-set."""
    pass


@dataclasses.dataclass(frozen=True)
class FixedProps(Generic[SP]):
    """
    Initial sub-set properties given as a single value.

    Every element receives its own deep copy of the value, such that no two
    sub-sets share the same (mutable) properties object.
    """

    value: SP

    def __call__(self, element: int, /) -> SP:
        """Get a fresh copy of the properties for the given element."""
        return copy.deepcopy(self.value)


@dataclasses.dataclass(frozen=True)
class PerIndexProps(Generic[SP]):
    """
    Initial sub-set properties given as a function of the element, called
    once for every element when the disjoint-set is created.

    Every element receives its own deep copy of the function's result, such
    that a function returning the same object for several elements does not
    make their sub-sets share properties.
    """

    function: Callable[[int], SP]

    def __call__(self, element: int, /) -> SP:
        """Get a fresh copy of the properties for the given element."""
        return copy.deepcopy(self.function(element))


InitialProps: TypeAlias = FixedProps[SP] | PerIndexProps[SP]
SubsetPropsReducer: TypeAlias = Callable[[SP, SP, Optional[EP]], SP]


def _resolve_initial_props(
    default_props: InitialProps[Any] | Callable[[int], Any] | Any | None
) -> InitialProps[Any]:
    """
    Resolve the default sub-set properties argument given to a disjoint-set
    into one of the two initial properties variants.
    """
    if isinstance(default_props, (FixedProps, PerIndexProps)):
        return default_props
    if default_props is None:
        return PerIndexProps(lambda element: {})
    if callable(default_props):
        return PerIndexProps(default_props)
    return FixedProps(default_props)


class DisjointSet(Generic[SP, EP]):
    """
    A disjoint-set data structure, also called union-find, over the fixed
    range of integer elements `[0, size)`, where each disjoint sub-set
    carries properties that are reduced whenever two sub-sets are unioned.

    Each disjoint sub-set is represented by its root, and all other elements
    in the same sub-set are stored in a tree structure that connects them to
    their root. Finding which sub-set an element is a member of reduces to
    finding its root. The path from an element to its root is compressed on
    look-ups, and unions are done by rank, such that root finding is
    constant amortised time.

    The parents and ranks of the elements are stored in numpy integer arrays
    allocated once on creation. The properties of sub-sets are stored in a
    list indexed by element, where only the entries of roots are valid. When
    two sub-sets are unioned, the reducer is given the properties of the
    surviving root, the properties of the absorbed root, and the properties
    of the edge that caused the union, and its result becomes the properties
    of the surviving root. The entry of the absorbed root is then cleared.

    This structure is not thread-safe, even for operations that look like
    reads, because finding roots compresses paths. Use
    `dsetkit.concurrency.synchronization.SynchronizedDisjointSet` if the
    disjoint-set is shared between threads.

    Example Usage
    -------------
    ```
    from dsetkit.datastructures.disjointset import DisjointSet

    # Track the maximum weight of the edges joining each sub-set.
    dset = DisjointSet(
        6,
        lambda s1, s2, edge: {
            "max_weight": max(s1["max_weight"], s2["max_weight"],
                              edge["weight"] if edge else 0)
        },
        {"max_weight": 0}
    )

    >>> dset.union(0, 1, {"weight": 2})
    0
    >>> dset.union(1, 2, {"weight": 4})
    0
    >>> dset.subset(2)
    [0, 1, 2]
    >>> dset.subset_props(2)
    {'max_weight': 4}
    >>> dset.num_subsets()
    4
    >>> str(dset)
    'Disjoint-Set: total elements = 6, total disjoint sub-sets = 4'
    ```
    """

    __DISJOINT_SET_LOGGER = logging.getLogger("DisjointSet")

    __slots__ = {
        "__size": "The number of elements in the disjoint-set.",
        "__parent_of": "Array mapping elements to their parent element.",
        "__rank_of": "Array mapping roots to the rank of their tree.",
        "__props_of": "List mapping roots to their sub-set properties.",
        "__num_subsets": "The number of disjoint sub-sets.",
        "__reducer": "Function combining the properties of unioned sub-sets.",
        "__find_method": "The find method used by this disjoint-set.",
        "__find": "The bound root finding function.",
        "__debug": "Whether to log debug messages."
    }

    def __init__(
        self,
        size: int,
        reducer: SubsetPropsReducer[SP, EP] | None = None,
        default_props: InitialProps[SP] | Callable[[int], SP] | SP | None = None,
        /,
        find_method: "FindMethod" | FindMethodNames = "loop_compress",
        debug: bool = False
    ) -> None:
        """
        Create a new disjoint-set of the given number of elements, where
        every element is initially in its own sub-set.

        Parameters
        ----------
        `size: int` - The number of elements in the disjoint-set. The
        elements are the integers in `[0, size)`.

        `reducer: ((SP, SP, EP | None) -> SP) | None = None` - Function
        combining the properties of two sub-sets when they are unioned. It is
        called as `reducer(surviving_props, absorbed_props, edge)` and must
        return the properties of the combined sub-set. If not given or None,
        sub-sets are still unioned, but their properties are never combined.

        `default_props: FixedProps[SP] | PerIndexProps[SP] | ((int) -> SP) |
        SP | None = None` - The initial properties of each sub-set. Plain
        callables are treated as `PerIndexProps` and any other value as
        `FixedProps`. If not given or None, each sub-set starts with an empty
        dictionary.

        `find_method: FindMethod | FindMethodNames = "loop_compress"` - The
        root finding method used by all operations.

        `debug: bool = False` - Whether to log debug messages.

        Raises
        ------
        `TypeError` - If the size is not an integer.

        `ValueError` - If the size is negative, or the find method is unknown.
        """
        if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
            raise TypeError(
                "Size of a disjoint-set must be an integer. "
                f"Got; {size!r} of type {type(size).__name__!r}."
            )
        if size < 0:
            raise ValueError(
                f"Size of a disjoint-set must be non-negative. Got; {size}."
            )
        size = int(size)

        self.__debug: bool = debug
        if self.__debug:
            self.__DISJOINT_SET_LOGGER.debug(
                "Creating new disjoint-set with: size=%s, reducer=%s, "
                "default_props=%s, find_method=%s",
                size, reducer, default_props, find_method
            )

        self.__size: int = size
        self.__parent_of: npt.NDArray[np.intp] = np.arange(size, dtype=np.intp)
        self.__rank_of: npt.NDArray[np.intp] = np.zeros(size, dtype=np.intp)
        self.__num_subsets: int = size

        initial_props = _resolve_initial_props(default_props)
        self.__reducer: SubsetPropsReducer[SP, EP] | None = reducer
        self.__props_of: list[SP | None] = [
            initial_props(element) for element in range(size)
        ]

        if isinstance(find_method, str):
            try:
                find_method = FindMethod[find_method.upper()]
            except KeyError as exc:
                raise ValueError(
                    f"Unknown find method {find_method!r}. Choose from; "
                    f"{[method.name.lower() for method in FindMethod]}."
                ) from exc
        self.__find_method: FindMethod = find_method
        self.__find: Callable[[int], int] = getattr(self, find_method.value)

    def __str__(self) -> str:
        """
        Return string summary representation describing number of elements and
        disjoint sub-sets.
        """
        return (f"Disjoint-Set: total elements = {self.__size}, "
                f"total disjoint sub-sets = {self.__num_subsets}")

    def __repr__(self) -> str:
        """Return a string representation listing the disjoint sub-sets."""
        return (f"{self.__class__.__name__}(size={self.__size}, "
                f"subsets={self.subsets()!r})")

    def __getitem__(self, element: int, /) -> int:
        """Find the root of the disjoint sub-set containing the element."""
        return self.find(element)

    def __contains__(self, element: object) -> bool:
        """Whether an element is in the disjoint-set."""
        return (isinstance(element, (int, np.integer))
                and not isinstance(element, bool)
                and 0 <= element < self.__size)

    def __iter__(self) -> Iterator[int]:
        """Return an iterator over all set elements."""
        return iter(range(self.__size))

    def __len__(self) -> int:
        """Get the number of elements in the disjoint-set."""
        return self.__size

    @property
    def size(self) -> int:
        """Get the number of elements in the disjoint-set."""
        return self.__size

    @property
    def parents(self) -> npt.NDArray[np.intp]:
        """Get a copy of the element to parent array."""
        return self.__parent_of.copy()

    @property
    def find_method(self) -> "FindMethod":
        """Get the root finding method used by this disjoint-set."""
        return self.__find_method

    @property
    def debug(self) -> bool:
        """Get whether this disjoint-set logs debug messages."""
        return self.__debug

    def __check_element(self, element: int) -> int:
        """
        Check that the element is in the disjoint-set and return it as a
        plain integer.
        """
        if element not in self:
            raise ElementIndexError(
                f"The element {element!r} of {type(element)!r} is not in the "
                f"disjoint-set {self!s}; elements must be integers in "
                f"[0, {self.__size})."
            )
        return int(element)

    def _find_loop_compress(self, element: int, /) -> int:
        """
        Find roots via an iterative search, then iteratively compress the
        path from the given element to the root, such that the parents of all
        non-root elements on the path are the root.
        """
        parent_of = self.__parent_of
        root: int = element
        while (parent := int(parent_of[root])) != root:
            root = parent

        # Compression performed by a seperate loop,
        # achieves maximum possible level of compression.
        while (parent := int(parent_of[element])) != root:
            parent_of[element] = root
            element = parent

        return root

    def _find_recurse_compress(self, element: int, /) -> int:
        """
        Recursive variant of full path compression.

        Union by rank bounds the height of every tree by the base two
        logarithm of the number of elements, so the recursion depth stays
        well within python's limit.
        """
        parent_of = self.__parent_of
        if (parent := int(parent_of[element])) == element:
            return element
        root = self._find_recurse_compress(parent)
        parent_of[element] = root
        return root

    def _find_path_split(self, element: int, /) -> int:
        """
        Partially compress the path during the search for the root, by
        replacing every element's parent on the path with its grandparent.
        """
        parent_of = self.__parent_of
        while (parent := int(parent_of[element])) != element:
            parent_of[element] = parent_of[parent]
            element = parent
        return element

    def _find_path_halve(self, element: int, /) -> int:
        """
        Partially compress the path during the search for the root, by
        replacing every other element's parent on the path with its
        grandparent, and checking only every other element.
        """
        parent_of = self.__parent_of
        while (parent := int(parent_of[element])) != element:
            grandparent = int(parent_of[parent])
            parent_of[element] = grandparent
            element = grandparent
        return element

    def find(self, element: int, /) -> int:
        """
        Find the root of the sub-set containing the given element.

        A root, is a set element, whose parent is itself. The path from the
        element to its root is compressed according to the find method of
        the disjoint-set. This changes the shape of the trees, but never the
        sub-set an element belongs to.

        Parameters
        ----------
        `element: int` - The element whose root to find.

        Returns
        -------
        `int` - The root of the sub-set containing the given element.

        Raises
        ------
        `ElementIndexError` - If the given element is not in this
        disjoint-set.
        """
        return self.__find(self.__check_element(element))

    def find_path(self, element: int, /) -> list[int]:
        """
        Find the current path from the given element to the root element of
        its disjoint sub-set, without compressing it.

        The list contains only the given element if and only if the given
        element is the root of its own sub-set.
        """
        element = self.__check_element(element)
        path: list[int] = [element]
        parent_of = self.__parent_of
        while (parent := int(parent_of[element])) != element:
            path.append(parent)
            element = parent
        return path

    def roots(self) -> list[int]:
        """Get the roots of all disjoint sub-sets in ascending order."""
        return np.flatnonzero(
            self.__parent_of == np.arange(self.__size, dtype=np.intp)
        ).tolist()

    def is_connected(
        self,
        element_1: int,
        element_2: int, /,
        *elements: int
    ) -> bool:
        """
        Determine whether the elements are in the same disjoint sub-set.

        If two elements are given, equivalent to:
            `self.find(element_1) == self.find(element_2)`.

        If more than two elements are given, equivalent to:
            `all(self.find(element_1) == self.find(other)
             for other in (element_2, *elements))`.

        Raises
        ------
        `ElementIndexError` - If any given element is not in this
        disjoint-set.
        """
        root_1: int = self.find(element_1)
        return all(
            root_1 == self.find(element)
            for element in (element_2, *elements)
        )

    def union(
        self,
        element_1: int,
        element_2: int, /,
        edge: EP | None = None
    ) -> int:
        """
        Union the sub-sets containing the given elements together, using the
        union-by-rank algorithm, and reduce their properties.

        The root of the sub-set with the lower rank is attached under the
        root of the sub-set with the higher rank. If the ranks are equal, the
        root of the first element survives and its rank increases by one.

        If the disjoint-set has a reducer, it is called exactly once as
        `reducer(surviving_props, absorbed_props, edge)` before the sub-sets
        are linked. Exceptions raised by the reducer propagate to the caller
        and leave the sub-sets, ranks, properties and number of sub-sets as
        they were.

        If both elements are already in the same sub-set, this does nothing,
        and the reducer is not called.

        Parameters
        ----------
        `element_1: int` - Any element of the disjoint-set.

        `element_2: int` - Any element of the disjoint-set.

        `edge: EP | None = None` - Properties of the edge connecting the
        elements, passed to the reducer.

        Returns
        -------
        `int` - The root element of the combined sub-set.

        Raises
        ------
        `ElementIndexError` - If either element is not in this disjoint-set.
        """
        element_1 = self.__check_element(element_1)
        element_2 = self.__check_element(element_2)
        root_1: int = self.__find(element_1)
        root_2: int = self.__find(element_2)
        if root_1 == root_2:
            return root_1

        # Union by rank - Always union the shorter tree into the longer tree,
        # ties go to the root of the first element.
        rank_of = self.__rank_of
        if rank_of[root_1] < rank_of[root_2]:
            surviving, absorbed = root_2, root_1
        else:
            surviving, absorbed = root_1, root_2

        props_of = self.__props_of
        if self.__reducer is not None:
            props_of[surviving] = self.__reducer(
                props_of[surviving],  # type: ignore[arg-type]
                props_of[absorbed],  # type: ignore[arg-type]
                edge
            )
        props_of[absorbed] = None

        self.__parent_of[absorbed] = surviving
        if rank_of[surviving] == rank_of[absorbed]:
            rank_of[surviving] += 1
        self.__num_subsets -= 1

        if self.__debug:
            self.__DISJOINT_SET_LOGGER.debug(
                "Unioned sub-set of root %s onto sub-set of root %s "
                "(edge=%s), disjoint sub-sets remaining: %s",
                absorbed, surviving, edge, self.__num_subsets
            )

        return surviving

    def union_many(
        self,
        elements: Iterable[int], /,
        edge: EP | None = None
    ) -> int:
        """
        Union all elements in the given iterable of elements onto the first,
        in order, passing the same edge properties to every union, and return
        the root of the resulting sub-set.

        Raises
        ------
        `ValueError` - If the iterable is empty.

        `ElementIndexError` - If any element is not in this disjoint-set.
        """
        iter_: Iterator[int] = iter(elements)
        try:
            first: int = next(iter_)
        except StopIteration as exc:
            message: str = "Cannot union an empty iterable of elements."
            raise ValueError(message) from exc
        root: int = self.find(first)
        for element in iter_:
            root = self.union(first, element, edge)
        return root

    def __find_all_roots(self) -> npt.NDArray[np.intp]:
        """Find the root of every element, compressing all paths."""
        find = self.__find
        return np.fromiter(
            (find(element) for element in range(self.__size)),
            dtype=np.intp,
            count=self.__size
        )

    def subsets(self) -> list[list[int]]:
        """
        Find all disjoint sub-sets in this disjoint-set.

        Returns
        -------
        `list[list[int]]` - The disjoint sub-sets, each sorted in ascending
        order, and ordered by their smallest element. Every element appears
        in exactly one sub-set.
        """
        if self.__size == 0:
            return []

        # A stable sort of the roots groups elements by root, whilst keeping
        # the elements of each group in ascending order.
        roots = self.__find_all_roots()
        order = np.argsort(roots, kind="stable")
        boundaries = np.flatnonzero(np.diff(roots[order])) + 1
        subsets: list[list[int]] = [
            group.tolist() for group in np.split(order, boundaries)
        ]
        subsets.sort(key=lambda subset: subset[0])
        return subsets

    def subset(self, element: int, /) -> list[int]:
        """
        Get the elements of the disjoint sub-set containing the given element
        in ascending order.

        Raises
        ------
        `ElementIndexError` - If the element is not in this disjoint-set.
        """
        root: int = self.find(element)
        return np.flatnonzero(self.__find_all_roots() == root).tolist()

    def num_subsets(self) -> int:
        """Get the number of disjoint sub-sets in this disjoint-set."""
        return self.__num_subsets

    def subset_props(self, element: int, /) -> SP:
        """
        Get the properties of the disjoint sub-set containing the given
        element.

        Raises
        ------
        `ElementIndexError` - If the element is not in this disjoint-set.
        """
        return self.__props_of[self.find(element)]  # type: ignore[return-value]


class FindMethod(enum.Enum):
    """
    The root finding methods that can be passed as argument to the
    constructor of a disjoint-set.

    Items
    -----
    `LOOP_COMPRESS` - Find roots iteratively, always fully compress the path.

    `RECURSE_COMPRESS` - Find roots recursively, always fully compress the
    path.

    `PATH_SPLIT` - Find roots iteratively, partially compress the path.

    `PATH_HALVE` - Find roots iteratively, skip every other element to
    increase speed, partially compress the path.
    """

    LOOP_COMPRESS = DisjointSet._find_loop_compress.__name__
    RECURSE_COMPRESS = DisjointSet._find_recurse_compress.__name__
    PATH_SPLIT = DisjointSet._find_path_split.__name__
    PATH_HALVE = DisjointSet._find_path_halve.__name__
