"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Árbol de fragmentos (Document arena, Element, Fragment)

Responsabilidades:
    - Representar el árbol de contenido del host: elementos y hojas de texto.
    - Asignar identidades estables a los nodos (arena Document).
    - Registrar cada mutación estructural para que el host pueda observarla
      (MutationRecord) y para poder afirmar "cero mutaciones" en una re-pasada.
    - Proveer primitivas de bajo nivel sobre listas de hijos y atributos.

Colaboradores:
    - application/annotator.py: único componente del motor que muta el árbol.
    - application/text_view.py: recorre fragmentos en orden de documento.
    - infrastructure/host_feed.py: traduce MutationRecord -> ChangeBatch.

Principios:
    - Sin dependencias a infraestructura.
    - Las primitivas NO conocen marcadores ni pasadas; eso vive en application.
===============================================================================
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from ..crosscutting.exceptions import TreeStructureError

# Contenedores "verbatim": su texto nunca se clasifica (exclusión estructural).
VERBATIM_TAGS = frozenset({"style", "script", "textarea", "pre", "code"})

# Elementos vacíos (sin hijos) al serializar.
_VOID_TAGS = frozenset({"br", "hr", "img", "wbr"})


@dataclass(frozen=True)
class MutationRecord:
    """
    Registro mínimo de una mutación.

    kind: "child_list" | "attributes" | "character_data"
    """

    kind: str
    target_id: int
    detail: str = ""


MutationListener = Callable[[MutationRecord, "Node"], None]


class Document:
    """
    Arena de nodos.

    Importante:
      - Los ids son monotónicos y nunca se reutilizan.
      - mutation_count crece con cada mutación registrada (cualquier nodo).
    """

    def __init__(self) -> None:
        self._next_id = 1
        self.mutation_count = 0
        self._listeners: list[MutationListener] = []

    def _allocate_id(self) -> int:
        node_id = self._next_id
        self._next_id += 1
        return node_id

    def element(
        self,
        tag: str,
        attrs: Optional[dict[str, str]] = None,
        children: tuple["Node", ...] | list["Node"] = (),
    ) -> "Element":
        el = Element(self, tag, attrs)
        for child in children:
            el.append(child)
        return el

    def text(self, value: str) -> "Fragment":
        return Fragment(self, value)

    def subscribe(self, listener: MutationListener) -> Callable[[], None]:
        """Registra un listener; devuelve la función para desuscribirlo."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def record(self, kind: str, node: "Node", detail: str = "") -> None:
        self.mutation_count += 1
        if not self._listeners:
            return
        rec = MutationRecord(kind=kind, target_id=node.id, detail=detail)
        for listener in list(self._listeners):
            listener(rec, node)


class Node:
    """Base de Element/Fragment: identidad, padre y navegación."""

    def __init__(self, document: Document) -> None:
        self.document = document
        self.id = document._allocate_id()
        self.parent: Optional[Element] = None

    # ------------------------------------------------------------------
    # Navegación
    # ------------------------------------------------------------------
    def ancestors(self) -> Iterator["Element"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def closest(self, predicate: Callable[["Element"], bool]) -> Optional["Element"]:
        """Primer ancestro (incluyéndose si es Element) que cumple predicate."""
        if isinstance(self, Element) and predicate(self):
            return self
        for anc in self.ancestors():
            if predicate(anc):
                return anc
        return None

    def is_descendant_of(self, other: "Element") -> bool:
        return any(anc is other for anc in self.ancestors())

    def index_in_parent(self) -> int:
        if self.parent is None:
            raise TreeStructureError(f"node {self.id} is detached")
        for i, child in enumerate(self.parent.children):
            if child is self:
                return i
        raise TreeStructureError(f"node {self.id} not found in its parent")

    def previous_sibling(self) -> Optional["Node"]:
        if self.parent is None:
            return None
        idx = self.index_in_parent()
        return self.parent.children[idx - 1] if idx > 0 else None

    def next_sibling(self) -> Optional["Node"]:
        if self.parent is None:
            return None
        idx = self.index_in_parent()
        siblings = self.parent.children
        return siblings[idx + 1] if idx + 1 < len(siblings) else None

    def text_content(self) -> str:
        raise NotImplementedError

    def to_markup(self) -> str:
        raise NotImplementedError

    def clone(self, deep: bool = True) -> "Node":
        raise NotImplementedError


class Fragment(Node):
    """
    Hoja de texto.

    engine_split: True si la pieza nació de un split del motor; al limpiar se
    vuelve a fusionar con su vecino izquierdo.
    """

    def __init__(self, document: Document, text: str) -> None:
        super().__init__(document)
        self._text = text or ""
        self.engine_split = False

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, value: str) -> None:
        if value == self._text:
            return
        self._text = value
        self.document.record("character_data", self)

    def text_content(self) -> str:
        return self._text

    def to_markup(self) -> str:
        return html.escape(self._text, quote=False)

    def clone(self, deep: bool = True) -> "Fragment":
        copy = Fragment(self.document, self._text)
        copy.engine_split = self.engine_split
        return copy

    def __repr__(self) -> str:
        return f"Fragment(id={self.id}, text={self._text!r})"


class Element(Node):
    """Elemento con tag, atributos y lista ordenada de hijos."""

    def __init__(
        self,
        document: Document,
        tag: str,
        attrs: Optional[dict[str, str]] = None,
    ) -> None:
        super().__init__(document)
        self.tag = tag.lower()
        self._attrs: dict[str, str] = dict(attrs or {})
        self.children: list[Node] = []

    # ------------------------------------------------------------------
    # Atributos
    # ------------------------------------------------------------------
    @property
    def attrs(self) -> dict[str, str]:
        """Vista de solo lectura (copia) de los atributos."""
        return dict(self._attrs)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._attrs.get(name, default)

    def has(self, name: str) -> bool:
        return name in self._attrs

    def set(self, name: str, value: str) -> None:
        if self._attrs.get(name) == value:
            return
        self._attrs[name] = value
        self.document.record("attributes", self, name)

    def remove(self, name: str) -> None:
        if name not in self._attrs:
            return
        del self._attrs[name]
        self.document.record("attributes", self, name)

    def replace_attrs(self, attrs: dict[str, str]) -> None:
        if attrs == self._attrs:
            return
        self._attrs = dict(attrs)
        self.document.record("attributes", self, "*")

    # ------------------------------------------------------------------
    # Lista de hijos (primitivas)
    # ------------------------------------------------------------------
    def insert(self, index: int, child: Node) -> None:
        if child.document is not self.document:
            raise TreeStructureError("cannot adopt a node from another document")
        if child is self or (isinstance(child, Element) and self.is_descendant_of(child)):
            raise TreeStructureError("cannot insert a node inside itself")
        if child.parent is not None:
            child.parent._detach(child)
        self.children.insert(index, child)
        child.parent = self
        self.document.record("child_list", self)

    def append(self, child: Node) -> None:
        self.insert(len(self.children), child)

    def remove_child(self, child: Node) -> None:
        if child.parent is not self:
            raise TreeStructureError(f"node {child.id} is not a child of {self.id}")
        self._detach(child)
        self.document.record("child_list", self)

    def replace_children(self, new_children: list[Node]) -> None:
        for child in list(self.children):
            self._detach(child)
        for child in new_children:
            if child.parent is not None:
                child.parent._detach(child)
            self.children.append(child)
            child.parent = self
        self.document.record("child_list", self)

    def _detach(self, child: Node) -> None:
        for i, existing in enumerate(self.children):
            if existing is child:
                del self.children[i]
                child.parent = None
                return
        raise TreeStructureError(f"node {child.id} is not a child of {self.id}")

    # ------------------------------------------------------------------
    # Recorridos
    # ------------------------------------------------------------------
    def iter_descendants(self) -> Iterator[Node]:
        """Descendientes en orden de documento (pre-orden)."""
        stack: list[Node] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, Element):
                stack.extend(reversed(node.children))

    def iter_fragments(self) -> Iterator[Fragment]:
        for node in self.iter_descendants():
            if isinstance(node, Fragment):
                yield node

    def find_all(self, predicate: Callable[["Element"], bool]) -> list["Element"]:
        return [
            node
            for node in self.iter_descendants()
            if isinstance(node, Element) and predicate(node)
        ]

    def find_first(self, predicate: Callable[["Element"], bool]) -> Optional["Element"]:
        for node in self.iter_descendants():
            if isinstance(node, Element) and predicate(node):
                return node
        return None

    def first_element_child(self) -> Optional["Element"]:
        for child in self.children:
            if isinstance(child, Element):
                return child
        return None

    # ------------------------------------------------------------------
    # Texto / serialización
    # ------------------------------------------------------------------
    def text_content(self) -> str:
        return "".join(frag.text for frag in self.iter_fragments())

    def to_markup(self) -> str:
        attrs = "".join(
            f' {name}="{html.escape(value, quote=True)}"'
            for name, value in self._attrs.items()
        )
        if self.tag in _VOID_TAGS and not self.children:
            return f"<{self.tag}{attrs}>"
        inner = "".join(child.to_markup() for child in self.children)
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"

    def inner_markup(self) -> str:
        return "".join(child.to_markup() for child in self.children)

    def clone(self, deep: bool = True) -> "Element":
        """Copia detached (mismo Document, ids nuevos)."""
        copy = Element(self.document, self.tag, self._attrs)
        if deep:
            for child in self.children:
                child_copy = child.clone(deep=True)
                copy.children.append(child_copy)
                child_copy.parent = copy
        return copy

    def __repr__(self) -> str:
        return f"Element(id={self.id}, tag={self.tag!r}, attrs={self._attrs!r})"


def is_verbatim(element: Element) -> bool:
    return element.tag in VERBATIM_TAGS
