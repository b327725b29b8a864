# ==============================================================================
# ALMACÉN CLAVE-VALOR - Funcionalidad común de persistencia
# ==============================================================================
# Dos implementaciones del mismo contrato (IKeyValueStore):
#   - MemoryKeyValueStore: solo proceso, para tests y demos
#   - JSONFileKeyValueStore: un documento JSON en disco
#
# Toda operación toma un lock re-entrante. compare_and_swap es la única
# escritura condicional; no existen transacciones entre claves.
# ==============================================================================

import json
import os
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from ferreteria.exceptions import UpstreamError


class BaseKeyValueStore(ABC):
    """
    Clase base abstracta para los almacenes clave-valor.

    Las subclases solo implementan _read_raw/_write_raw sobre el documento
    completo {clave: valor}; las operaciones del contrato se construyen aquí
    encima, siempre bajo el lock de la instancia.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._closed = False

    @abstractmethod
    def _read_raw(self) -> Dict[str, Any]:
        """
        Lee el documento completo.

        Raises:
            UpstreamError: Si el almacenamiento no responde o está corrupto
        """

    @abstractmethod
    def _write_raw(self, data: Dict[str, Any]) -> None:
        """
        Escribe el documento completo.

        Raises:
            UpstreamError: Si el almacenamiento no acepta la escritura
        """

    def _check_open(self) -> None:
        if self._closed:
            raise UpstreamError('El almacén de datos está cerrado')

    # =========================================================================
    # LECTURA
    # =========================================================================

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            self._check_open()
            return self._read_raw().get(key)

    def keys(self, prefix: str = '') -> List[str]:
        with self._lock:
            self._check_open()
            return sorted(k for k in self._read_raw() if k.startswith(prefix))

    def get_by_prefix(self, prefix: str) -> List[Any]:
        with self._lock:
            self._check_open()
            data = self._read_raw()
            return [data[k] for k in sorted(data) if k.startswith(prefix)]

    def mget(self, keys: Iterable[str]) -> List[Optional[Any]]:
        with self._lock:
            self._check_open()
            data = self._read_raw()
            return [data.get(k) for k in keys]

    # =========================================================================
    # ESCRITURA
    # =========================================================================

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._check_open()
            data = self._read_raw()
            data[key] = value
            self._write_raw(data)

    def mset(self, items: Dict[str, Any]) -> None:
        if not items:
            return
        with self._lock:
            self._check_open()
            data = self._read_raw()
            data.update(items)
            self._write_raw(data)

    def delete(self, key: str) -> bool:
        with self._lock:
            self._check_open()
            data = self._read_raw()
            if key not in data:
                return False
            del data[key]
            self._write_raw(data)
            return True

    def mdel(self, keys: Iterable[str]) -> int:
        with self._lock:
            self._check_open()
            data = self._read_raw()
            removed = 0
            for key in keys:
                if key in data:
                    del data[key]
                    removed += 1
            if removed:
                self._write_raw(data)
            return removed

    def compare_and_swap(self, key: str, expected: Optional[Any], new: Any) -> bool:
        """
        Escritura condicional atómica sobre una clave.

        Args:
            key: Clave a escribir
            expected: Valor que se espera encontrar (None = la clave no existe)
            new: Valor nuevo

        Returns:
            True si se escribió, False si el valor actual no coincidía
        """
        with self._lock:
            self._check_open()
            data = self._read_raw()
            if data.get(key) != expected:
                return False
            data[key] = new
            self._write_raw(data)
            return True

    # =========================================================================
    # CICLO DE VIDA
    # =========================================================================

    def close(self) -> None:
        with self._lock:
            self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed


class MemoryKeyValueStore(BaseKeyValueStore):
    """
    Almacén en memoria. El documento se guarda serializado como texto JSON,
    así los llamadores nunca comparten referencias con lo almacenado y los
    valores no serializables fallan igual que en disco.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        super().__init__()
        self._snapshot = '{}'
        if initial:
            self._write_raw(dict(initial))

    def _read_raw(self) -> Dict[str, Any]:
        return json.loads(self._snapshot)

    def _write_raw(self, data: Dict[str, Any]) -> None:
        try:
            self._snapshot = json.dumps(data, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise UpstreamError(f"Valor no serializable: {e}")


class JSONFileKeyValueStore(BaseKeyValueStore):
    """
    Almacén respaldado por un archivo JSON.

    Cada operación vuelve a leer el archivo (el disco es la única fuente de
    verdad, no hay caché). La escritura va a un archivo temporal y luego se
    renombra con os.replace, que es atómico en la mayoría de sistemas.
    """

    def __init__(self, file_path: str):
        """
        Args:
            file_path: Ruta absoluta al archivo JSON de datos
        """
        super().__init__()
        self.file_path = file_path
        directory = os.path.dirname(os.path.abspath(file_path))
        os.makedirs(directory, exist_ok=True)

    def _read_raw(self) -> Dict[str, Any]:
        if not os.path.exists(self.file_path):
            return {}
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise UpstreamError(f"No se pudo leer {self.file_path}: {e}")
        if not isinstance(data, dict):
            raise UpstreamError(f"Formato inválido en {self.file_path}: se esperaba un objeto JSON")
        return data

    def _write_raw(self, data: Dict[str, Any]) -> None:
        temp_path = self.file_path + '.tmp'
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(temp_path, self.file_path)
        except (OSError, TypeError, ValueError) as e:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise UpstreamError(f"No se pudo escribir {self.file_path}: {e}")
