# Copyright 2024, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" Meshing parameters.

Module level constants hold the default values of all tunables used by
the meshing pipeline. A :class:`Parameters` instance collects a consistent
set of values for a single build; keyword arguments override defaults.

Note
----
Changing a module level constant changes the default of every
:class:`Parameters` object created afterwards.
"""

DELTA = 0.8
""" Acceptance ratio of theoretical radius over circumradius. """

RAD_COEF = 0.577
""" Circumradius coefficient applied to the local target spacing. """

SPACE_COEF = 0.5
""" Minimal admissible distance of a new point to existing vertices,
relative to the local target spacing. """

SMOOTH_WEIGHT = 0.4
""" Relaxation weight of a smoothing move. """

SMOOTH_PASSES = 5
""" Number of smoothing sweeps. """

EPSILON = 1.192092896e-07
""" Geometric tolerance, single precision machine epsilon. """

ON_EDGE_EPS = 1e-6
""" Distance below which an inserted point is snapped onto an edge. """

BELONG_TOL = 1e-7
""" Tolerance of point-on-segment tests. """

SWAP_EPS = 1e-4
""" Convexity threshold for edge swaps (sine of the smallest corner). """

MAX_RECOVER_STEPS = 10000
""" Cap on insertions (or swap passes) per recovered boundary segment. """

MAX_REFINE_STEPS = 1000000
""" Cap on refinement steps of a single build. """

RECOVERY = 'midpoint'
""" Boundary recovery policy, either 'midpoint' or 'swap'. """

RELAX = False
""" Run degree based edge relaxation after smoothing. """


class Parameters:
    """ Tunable meshing parameters.

    Parameters
    ----------
    **kwargs
        Lower case parameter names and values, e.g. ``delta=0.75``.

    Raises
    ------
    TypeError
        If an unknown parameter name is passed.
    ValueError
        If a parameter value is out of range.


    All parameters are plain instance attributes:

    >>> params = Parameters(smooth_passes=0, recovery='swap')
    >>> params.delta
    0.8
    """

    _names = ('delta', 'rad_coef', 'space_coef', 'smooth_weight',
              'smooth_passes', 'epsilon', 'on_edge_eps', 'belong_tol',
              'swap_eps', 'max_recover_steps', 'max_refine_steps',
              'recovery', 'relax')

    def __init__(self, **kwargs):
        for name in self._names:
            setattr(self, name, globals()[name.upper()])

        for key, value in kwargs.items():
            if key not in self._names:
                raise TypeError(f'unknown parameter {key!r}')

            setattr(self, key, value)

        self._check()

    def __repr__(self):
        args = ', '.join(f'{name}={getattr(self, name)!r}'
                         for name in self._names)
        return f'Parameters({args})'

    def __eq__(self, other):
        if not isinstance(other, Parameters):
            return NotImplemented

        return all(getattr(self, name) == getattr(other, name)
                   for name in self._names)

    def copy(self, **kwargs):
        """ Copy with overrides.

        Parameters
        ----------
        **kwargs
            Parameter values that replace the copied ones.

        Returns
        -------
        Parameters
            New parameter object.
        """
        values = {name: getattr(self, name) for name in self._names}
        values.update(kwargs)

        return Parameters(**values)

    def _check(self):
        """ Validate parameter ranges.
        """
        if not 0.0 < self.delta <= 1.0:
            raise ValueError(f'delta must be in (0, 1], got {self.delta}')

        for name in ('rad_coef', 'space_coef', 'epsilon', 'on_edge_eps',
                     'belong_tol', 'swap_eps'):
            if getattr(self, name) <= 0.0:
                raise ValueError(f'{name} must be positive')

        if not 0.0 <= self.smooth_weight <= 1.0:
            raise ValueError('smooth_weight must be in [0, 1]')

        if self.smooth_passes < 0:
            raise ValueError('smooth_passes must be non-negative')

        if self.recovery not in ('midpoint', 'swap'):
            raise ValueError(f"recovery must be 'midpoint' or 'swap', " +
                             f"got {self.recovery!r}")

        for name in ('max_recover_steps', 'max_refine_steps'):
            if getattr(self, name) < 1:
                raise ValueError(f'{name} must be at least 1')
