###############################################################################
# Copyright (C) 2023 Oliver Michael Kamperis
# Email: olliekampo@gmail.com
#
# This program is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License as published by the Free Software
# Foundation, either version 3 of the License, or any later version.
#
# This program is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS
# FOR A PARTICULAR PURPOSE. See the GNU General Public License for details.
#
# You should have received a copy of the GNU General Public License along with
# this program. If not, see <https://www.gnu.org/licenses/>.

"""Module containing a synchronized disjoint-set for sharing between threads."""

import contextlib
import functools
import logging
import threading
import types
from typing import (Callable, Concatenate, Iterable, ParamSpec, TypeVar)

import numpy as np
import numpy.typing as npt
from typing_extensions import override

from dsetkit.datastructures.disjointset import (EP, SP, DisjointSet,
                                                FindMethod, FindMethodNames,
                                                InitialProps,
                                                SubsetPropsReducer)

__copyright__ = "Copyright (C) 2023 Oliver Michael Kamperis"
__license__ = "GPL-3.0"

__all__ = (
    "synchronize_method",
    "SynchronizedDisjointSet"
)


def __dir__() -> tuple[str, ...]:
    """Get the names of module attributes."""
    return __all__


CT = TypeVar("CT", bound="SynchronizedDisjointSet")
PS = ParamSpec("PS")
RT = TypeVar("RT")


def synchronize_method(
    method: Callable[Concatenate[CT, PS], RT]
) -> Callable[Concatenate[CT, PS], RT]:
    """
    Decorate a method of a synchronized disjoint-set such that it runs whilst
    holding the instance lock.
    """
    @functools.wraps(method)
    def synchronize_method_wrapper(
        self: CT,
        *args: PS.args,
        **kwargs: PS.kwargs
    ) -> RT:
        """Execute the method whilst holding the instance lock."""
        with self.lock:
            return method(self, *args, **kwargs)
    return synchronize_method_wrapper


class SynchronizedDisjointSet(DisjointSet[SP, EP],
                              contextlib.AbstractContextManager):
    """
    A disjoint-set whose operations are all guarded by a single reentrant
    instance lock.

    Finding roots compresses paths, so even operations that only look like
    reads (`find`, `is_connected`, `subset_props`, ...) mutate the
    disjoint-set, and there is no lock-free read path. Every public operation
    therefore acquires the same lock.

    The disjoint-set is also a context manager that holds the lock, for
    performing compound operations atomically:
    ```
    >>> dset = SynchronizedDisjointSet(10)
    >>> with dset:
    ...     if not dset.is_connected(0, 1):
    ...         dset.union(0, 1)
    ```
    """

    __SYNC_LOGGER = logging.getLogger("SynchronizedDisjointSet")

    __slots__ = {
        "__lock": "The reentrant lock guarding the disjoint-set."
    }

    def __init__(
        self,
        size: int,
        reducer: SubsetPropsReducer[SP, EP] | None = None,
        default_props: InitialProps[SP] | Callable[[int], SP] | SP | None = None,
        /,
        find_method: FindMethod | FindMethodNames = "loop_compress",
        debug: bool = False
    ) -> None:
        """
        Create a new synchronized disjoint-set. Parameters are the same as for
        `DisjointSet`.
        """
        super().__init__(
            size, reducer, default_props,
            find_method=find_method, debug=debug
        )
        self.__lock = threading.RLock()
        if self.debug:
            self.__SYNC_LOGGER.debug(
                "Created synchronized disjoint-set with lock %r.", self.__lock
            )

    @property
    def lock(self) -> threading.RLock:
        """Get the reentrant lock guarding the disjoint-set."""
        return self.__lock  # type: ignore[return-value]

    @override
    def __enter__(self) -> "SynchronizedDisjointSet[SP, EP]":
        """Acquire the instance lock."""
        self.__lock.acquire()
        return self

    @override
    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None
    ) -> None:
        """Release the instance lock when the context manager exits."""
        self.__lock.release()

    @override
    def __str__(self) -> str:
        with self.__lock:
            return super().__str__()

    @property
    @override
    def parents(self) -> npt.NDArray[np.intp]:
        """Get a copy of the element to parent array."""
        with self.__lock:
            return super().parents

    @override
    @synchronize_method
    def find(self, element: int, /) -> int:
        return super().find(element)

    @override
    @synchronize_method
    def find_path(self, element: int, /) -> list[int]:
        return super().find_path(element)

    @override
    @synchronize_method
    def roots(self) -> list[int]:
        return super().roots()

    @override
    @synchronize_method
    def is_connected(
        self,
        element_1: int,
        element_2: int, /,
        *elements: int
    ) -> bool:
        return super().is_connected(element_1, element_2, *elements)

    @override
    @synchronize_method
    def union(
        self,
        element_1: int,
        element_2: int, /,
        edge: EP | None = None
    ) -> int:
        return super().union(element_1, element_2, edge)

    @override
    @synchronize_method
    def union_many(
        self,
        elements: Iterable[int], /,
        edge: EP | None = None
    ) -> int:
        return super().union_many(elements, edge)

    @override
    @synchronize_method
    def subsets(self) -> list[list[int]]:
        return super().subsets()

    @override
    @synchronize_method
    def subset(self, element: int, /) -> list[int]:
        return super().subset(element)

    @override
    @synchronize_method
    def num_subsets(self) -> int:
        return super().num_subsets()

    @override
    @synchronize_method
    def subset_props(self, element: int, /) -> SP:
        return super().subset_props(element)
