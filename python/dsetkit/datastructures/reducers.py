###########################################################################
###########################################################################
## Reducers for combining the properties of disjoint sub-sets.           ##
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
Module containing ready-made sub-set property reducers for disjoint-sets.

A reducer is called as `reducer(surviving_props, absorbed_props, edge)`
whenever two sub-sets are unioned, and returns the properties of the combined
sub-set. All reducers here return new dictionaries and never modify their
arguments.
"""

from typing import Any, Callable, Hashable, Mapping, Optional

__copyright__ = "Copyright (C) 2022 Oliver Michael Kamperis"
__license__ = "GPL-3.0"

__all__ = (
    "merge_dicts",
    "max_of",
    "union_of"
)


def __dir__() -> tuple[str, ...]:
    """Get the names of module attributes."""
    return __all__


DictReducer = Callable[
    [Mapping[str, Any], Mapping[str, Any], Optional[Mapping[str, Any]]],
    dict[str, Any]
]


def merge_dicts(
    surviving: Mapping[str, Any],
    absorbed: Mapping[str, Any],
    edge: Optional[Mapping[str, Any]] = None
) -> dict[str, Any]:
    """
    Merge the properties of two sub-sets and an edge into a new dictionary.

    Keys of the absorbed sub-set override those of the surviving sub-set,
    and keys of the edge override both.
    """
    return {**surviving, **absorbed, **(edge or {})}


def max_of(
    key: str,
    edge_key: str | None = None,
    default: Any = 0
) -> DictReducer:
    """
    Create a reducer that tracks the maximum of a field over the sub-sets and
    the edges that joined them.

    Parameters
    ----------
    `key: str` - The sub-set property holding the running maximum.

    `edge_key: str | None = None` - The edge property compared against the
    running maximum. If not given or None, the same as `key`.

    `default: Any = 0` - The value used for an edge that is missing or does
    not have the edge property.

    For example, to track the maximum edge weight of each sub-set:
    ```
    >>> dset = DisjointSet(6, max_of("max_weight", "weight"),
    ...                    {"max_weight": 0})
    >>> dset.union(0, 1, {"weight": 2})
    0
    >>> dset.subset_props(1)
    {'max_weight': 2}
    ```
    """
    if edge_key is None:
        edge_key = key

    def reducer(
        surviving: Mapping[str, Any],
        absorbed: Mapping[str, Any],
        edge: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]:
        edge_value = default if edge is None else edge.get(edge_key, default)
        return {
            **surviving,
            key: max(surviving[key], absorbed[key], edge_value)
        }

    reducer.__name__ = f"max_of_{key}"
    return reducer


def union_of(key: str) -> DictReducer:
    """
    Create a reducer that combines a set-valued sub-set property, such as a
    set of labels, into the union of both sub-sets' sets. The edge is
    ignored.
    """

    def reducer(
        surviving: Mapping[str, Any],
        absorbed: Mapping[str, Any],
        edge: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]:
        combined: frozenset[Hashable] | set[Hashable] = (
            surviving[key] | absorbed[key]
        )
        return {**surviving, key: combined}

    reducer.__name__ = f"union_of_{key}"
    return reducer
