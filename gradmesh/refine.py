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

""" Size driven refinement.

Faces are scored by comparing their circumradius with a theoretical radius
derived from the local target spacing. Undersized regions are refined from
their frontier with well sized (or missing) neighbors inwards: the active
face of largest circumradius receives a new point placed off its reference
edge, until no active face remains.

Note
----
A face is classified as :attr:`~gradmesh.flags.FaceState.ACCEPTED` if the
ratio of its theoretical radius over its circumradius exceeds the
acceptance ratio `delta`.
"""

import logging
import math

import numpy as np

import gradmesh.geom as geom

from gradmesh.flags import FaceState
from gradmesh.hds import ConvergenceError
from gradmesh.hds import ConstrainedEdgeError


logger = logging.getLogger(__name__)


def space_function(mesh, face, point):
    """ Local target spacing.

    Evaluated through the external size mesh of `mesh` if present and
    `point` is covered by it, by barycentric interpolation of the vertex
    spacing values of `face` otherwise.

    Parameters
    ----------
    mesh : Triangulation
        The mesh being refined.
    face : Face
        A triangle near `point`.
    point : array_like, shape (2, )
        Evaluation position.

    Returns
    -------
    float
        Target spacing.
    """
    if mesh.size_mesh is not None:
        value = mesh.size_mesh.sample_elevation(point)

        if value is not None and value > 0.0:
            return value

    a, b, c = face.vertices[:3]
    la, lb, lc = geom.barycentric(point, a.point, b.point, c.point)

    return la*a.space + lb*b.space + lc*c.space


def set_parameters(mesh, face):
    """ Score a face.

    Recomputes the circumcircle and sets the face state to ACCEPTED or
    NONE.
    """
    params = mesh.params

    face.update()

    a, b, c = face.vertices[:3]
    center = geom.centroid(a.point, b.point, c.point)
    radius = params.rad_coef * space_function(mesh, face, center)

    if radius / face.circumradius > params.delta:
        face.state = FaceState.ACCEPTED
    else:
        face.state = FaceState.NONE


def classify(mesh, face):
    """ Update the set of active faces around a scored face.

    An accepted face activates all neighbors that are not accepted. A face
    in state NONE becomes active if it has an accepted or missing
    neighbor, otherwise it is put into state WAITING.
    """
    if face.state is FaceState.ACCEPTED:
        for g in face.neighbors:
            if g is not None and g.state is not FaceState.ACCEPTED:
                if not g.active:
                    mesh.activate(g)
    elif face.state is FaceState.NONE:
        if any(g is None or g.state is FaceState.ACCEPTED
               for g in face.neighbors):
            mesh.activate(face)
        else:
            face.state = FaceState.WAITING


def first_classification(mesh):
    """ Score and classify all faces, enabling classification.
    """
    faces = mesh.faces

    for f in faces:
        mesh.deactivate(f)
        set_parameters(mesh, f)

    for f in faces:
        classify(mesh, f)

    mesh.classification = True

    logger.debug('[refine] %d of %d faces active', len(mesh.active_faces),
                 len(faces))


def insertion_point(mesh, face):
    """ Provisional position of a refinement point.

    The reference edge is the first edge of `face` without neighbor or,
    failing that, the last edge with an accepted neighbor. The point is
    placed on the perpendicular bisector of the reference edge, inside
    `face`, such that the triangle it forms with the reference edge has a
    circumradius close to the theoretical radius.

    Returns
    -------
    ~numpy.ndarray, shape (2, )
        Point position, the first corner of `face` if it has no
        reference edge.
    """
    params = mesh.params
    ref = None

    for e in face.edges:
        g = e.cw_face

        if g is None:
            ref = e
            break

        if g.state is FaceState.ACCEPTED:
            ref = e

    if ref is None:
        return np.array(face[0].point)

    a, b = ref.origin.point, ref.dest.point
    mid = geom.midpoint(a, b)

    p = 0.5 * geom.distance(a, b)
    q = geom.distance(mid, face.circumcenter)

    r = params.rad_coef * space_function(mesh, face, mid)
    r = max(r, p)

    if q > 0.0:
        r = min(r, (p*p + q*q) / (2.0*q))

    # The left normal points into the face.
    versor = geom.normal_versor(b - a)

    return mid + (r + math.sqrt(max(r*r - p*p, 0.0))) * versor


def spacing_test(face, point, size, space_coef):
    """ Minimal distance test.

    Returns
    -------
    bool
        :obj:`True` if `point` keeps a distance of at least
        ``space_coef * size`` to every corner of `face`.
    """
    limit = space_coef * size

    return all(geom.distance(point, v.point) >= limit for v in face)


def refine_step(mesh):
    """ Single refinement step.

    Processes the active face of largest circumradius. Its insertion point
    is located, tested against the spacing of the containing triangle and
    inserted. The face is deactivated if the point is not inserted.

    Returns
    -------
    bool
        :obj:`True` if a vertex was inserted.
    """
    face, _ = mesh.active_faces.top
    point = insertion_point(mesh, face)

    e = mesh.locate(point, start=face.edges[0])

    if e is None or e.face is None:
        mesh.deactivate(face)
        return False

    target = e.face
    size = space_function(mesh, target, point)

    if not spacing_test(target, point, size, mesh.params.space_coef):
        mesh.deactivate(face)
        return False

    try:
        _, created = mesh._insert_point(point, size)
    except ConstrainedEdgeError:
        logger.debug('[refine] point %s on boundary edge skipped', point)
        created = False

    if not created:
        mesh.deactivate(face)

    return created


def refine(mesh, size_mesh=None):
    """ Refine until no active face remains.

    Parameters
    ----------
    mesh : Triangulation
        A triangulation whose vertices carry target spacing values.
    size_mesh : Triangulation, optional
        External size function, see
        :meth:`~gradmesh.delaunay.Triangulation.from_samples`.

    Raises
    ------
    ConvergenceError
        If the number of steps exceeds the parameter `max_refine_steps`.

    Returns
    -------
    int
        Number of inserted vertices.
    """
    if size_mesh is not None:
        mesh.size_mesh = size_mesh

    if not mesh.classification:
        first_classification(mesh)

    steps, inserted = 0, 0
    cap = mesh.params.max_refine_steps

    while mesh.active_faces:
        steps += 1

        if steps > cap:
            raise ConvergenceError(f'refinement exceeded {cap} steps')

        if refine_step(mesh):
            inserted += 1

    logger.debug('[refine] %d vertices inserted in %d steps', inserted,
                 steps)

    return inserted
