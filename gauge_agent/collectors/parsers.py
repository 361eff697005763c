"""
Analyse des sorties d'utilitaires système et conversions d'unités

Fonctions pures, sans accès au système : chacune reçoit le texte produit par
un utilitaire (ou un pseudo-fichier) et retourne des valeurs typées, ou lève
ParseFailure si le format ne correspond pas.
"""

import os
import re
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from ..core.errors import ParseFailure


KB_PER_MB = 1024
BYTES_PER_MB = 1024 * 1024
DEFAULT_PAGE_SIZE = 4096

# Ordre fixe des catégories de /proc/stat
LINUX_CPU_CATEGORIES = ('user', 'nice', 'system', 'idle', 'iowait')

# Catégories de pages vm_stat prises en compte dans le total
VM_STAT_FREE_CATEGORIES = ('free', 'inactive', 'speculative')
VM_STAT_USED_CATEGORIES = ('active', 'wired down', 'occupied by compressor')


class DiskUsage(NamedTuple):
    device: str
    mount_point: str
    total_bytes: int
    used_bytes: int
    available_bytes: int


class InodeUsage(NamedTuple):
    device: str
    mount_point: str
    used: int
    free: int


class DiskReading(NamedTuple):
    """Lecture brute d'activité disque, conservée d'un cycle à l'autre"""
    timestamp: float
    device: str
    utilization: int


# Conversions

def kb_to_mb(value: float) -> float:
    return value / KB_PER_MB


def bytes_to_mb(value: float) -> float:
    return value / BYTES_PER_MB


def percent(part: float, whole: float) -> Optional[float]:
    """Pourcentage de part dans whole, None si whole est nul"""
    if whole <= 0:
        return None
    return part / whole * 100


def device_name(device_path: str) -> str:
    """Nom court d'un périphérique (ex: /dev/sda1 -> sda1)"""
    return os.path.basename(device_path.rstrip('/'))


def _to_int(value: str, source: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ParseFailure(source, f"valeur numérique attendue, reçu {value!r}")


def _to_float(value: str, source: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ParseFailure(source, f"valeur numérique attendue, reçu {value!r}")


# Calculs de deltas

def cpu_percentages(previous: Sequence[float], current: Sequence[float],
                    categories: Sequence[str]) -> Optional[Dict[str, float]]:
    """
    Répartition CPU entre deux lectures brutes successives

    Pour chaque catégorie : abs(précédent - courant) / delta_total * 100,
    où delta_total est la somme des deltas de toutes les catégories.

    Args:
        previous: Compteurs du cycle précédent
        current: Compteurs du cycle courant
        categories: Noms des catégories, dans l'ordre des compteurs

    Returns:
        dict: Pourcentage par catégorie, None si aucun tick n'a été compté
    """
    if len(previous) != len(categories) or len(current) != len(categories):
        raise ParseFailure('cpu', "nombre de compteurs différent entre deux lectures")

    deltas = [abs(before - after) for before, after in zip(previous, current)]
    total_delta = sum(deltas)
    if total_delta <= 0:
        return None

    return {
        category: delta / total_delta * 100
        for category, delta in zip(categories, deltas)
    }


def io_utilization_percent(previous: DiskReading, current: DiskReading) -> Optional[float]:
    """
    Taux d'occupation d'un disque entre deux lectures

    (u1 - u0) / ((t1 - t0) * 1000) * 100, avec t en secondes et u en
    millisecondes passées à traiter des entrées/sorties.
    """
    elapsed_ms = (current.timestamp - previous.timestamp) * 1000
    busy_ms = current.utilization - previous.utilization
    # Compteur remis à zéro (redémarrage, débordement) : pas de mesure
    if elapsed_ms <= 0 or busy_ms < 0:
        return None
    return busy_ms / elapsed_ms * 100


# Linux

def parse_proc_stat_cpu(text: str) -> List[int]:
    """
    Extrait les compteurs agrégés de la ligne 'cpu' de /proc/stat

    Returns:
        list: Compteurs user, nice, system, idle, iowait
    """
    for line in text.splitlines():
        parts = line.split()
        if parts and parts[0] == 'cpu':
            if len(parts) < len(LINUX_CPU_CATEGORIES) + 1:
                raise ParseFailure('/proc/stat', "ligne cpu incomplète")
            return [_to_int(value, '/proc/stat') for value in parts[1:len(LINUX_CPU_CATEGORIES) + 1]]

    raise ParseFailure('/proc/stat', "ligne cpu introuvable")


def parse_loadavg(text: str) -> Tuple[float, float, float]:
    """Charges moyennes 1, 5 et 15 minutes depuis /proc/loadavg"""
    parts = text.split()
    if len(parts) < 3:
        raise ParseFailure('/proc/loadavg', "moins de trois valeurs")
    return (
        _to_float(parts[0], '/proc/loadavg'),
        _to_float(parts[1], '/proc/loadavg'),
        _to_float(parts[2], '/proc/loadavg'),
    )


def parse_free(text: str) -> Dict[str, Dict[str, int]]:
    """
    Analyse la sortie de 'free -k'

    La colonne 'available' est utilisée comme mémoire libre quand l'outil la
    fournit, sinon la ligne '-/+ buffers/cache' des anciennes versions, sinon
    la colonne 'free'.

    Returns:
        dict: {'Mem': {'total', 'used', 'free'}, 'Swap': {...}} en KB
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines or ':' in lines[0].split()[0]:
        raise ParseFailure('free', "en-tête absent")

    columns = lines[0].split()
    rows = {}
    for line in lines[1:]:
        label, _, values = line.partition(':')
        rows[label.strip()] = values.split()

    if 'Mem' not in rows:
        raise ParseFailure('free', "ligne Mem absente")

    result = {}
    for label in ('Mem', 'Swap'):
        values = rows.get(label)
        if values is None:
            continue
        named = dict(zip(columns, (_to_int(v, 'free') for v in values)))
        if 'total' not in named or 'used' not in named or 'free' not in named:
            raise ParseFailure('free', f"colonnes manquantes pour {label}")

        entry = {'total': named['total'], 'used': named['used'], 'free': named['free']}
        if label == 'Mem':
            if 'available' in named:
                entry['free'] = named['available']
                entry['used'] = named['total'] - named['available']
            elif '-/+ buffers/cache' in rows and len(rows['-/+ buffers/cache']) >= 2:
                cache_row = rows['-/+ buffers/cache']
                entry['used'] = _to_int(cache_row[0], 'free')
                entry['free'] = _to_int(cache_row[1], 'free')
        result[label] = entry

    return result


def parse_diskstats(text: str) -> Dict[str, int]:
    """
    Temps passé en entrées/sorties (ms) par périphérique depuis /proc/diskstats

    Returns:
        dict: nom du périphérique -> millisecondes cumulées
    """
    stats = {}
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 14:
            continue
        stats[parts[2]] = _to_int(parts[12], '/proc/diskstats')

    if not stats:
        raise ParseFailure('/proc/diskstats', "aucun périphérique")
    return stats


_MOUNT_LINE = re.compile(r'^(?P<device>\S+) on (?P<mount_point>.+?) (?:type \S+ )?\(')


def parse_mount(text: str) -> Dict[str, str]:
    """
    Points de montage des périphériques depuis la sortie de 'mount'

    Accepte les formats Linux ('... on / type ext4 (rw)') et macOS
    ('... on / (apfs, local)').

    Returns:
        dict: chemin du périphérique -> point de montage
    """
    mounts = {}
    for line in text.splitlines():
        match = _MOUNT_LINE.match(line.strip())
        if match:
            device, mount_point = match.group('device'), match.group('mount_point')
            if device not in mounts or mount_point == '/':
                mounts[device] = mount_point
    return mounts


# df (Linux et macOS)

def _parse_df_table(text: str, source: str) -> Tuple[List[str], List[Tuple[str, str, Dict[str, str]]]]:
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        raise ParseFailure(source, "sortie vide")

    header = lines[0]
    position = header.find('Mounted on')
    if position < 0:
        raise ParseFailure(source, "colonne 'Mounted on' absente")

    columns = header[:position].split()
    rows = []
    for line in lines[1:]:
        parts = line.split(None, len(columns))
        if len(parts) != len(columns) + 1:
            continue
        fields = {column.lower(): value for column, value in zip(columns[1:], parts[1:-1])}
        rows.append((parts[0], parts[-1], fields))

    return columns, rows


def parse_df_capacity(text: str) -> List[DiskUsage]:
    """
    Analyse la sortie de 'df -kP' pour les périphériques /dev/*

    La taille de bloc est lue dans l'en-tête (ex: '1024-blocks').
    """
    columns, rows = _parse_df_table(text, 'df')

    block_size = None
    blocks_column = None
    for column in columns[1:]:
        match = re.match(r'^(\d+)-blocks$', column, re.IGNORECASE)
        if match:
            block_size = int(match.group(1))
            blocks_column = column.lower()
            break
    if block_size is None:
        raise ParseFailure('df', "taille de bloc introuvable dans l'en-tête")

    usages = []
    for device, mount_point, fields in rows:
        if not device.startswith('/dev/'):
            continue
        try:
            total = fields[blocks_column]
            used = fields['used']
            available = fields.get('available', fields.get('avail'))
        except KeyError:
            raise ParseFailure('df', "colonnes Used/Available absentes")
        usages.append(DiskUsage(
            device=device,
            mount_point=mount_point,
            total_bytes=_to_int(total, 'df') * block_size,
            used_bytes=_to_int(used, 'df') * block_size,
            available_bytes=_to_int(available, 'df') * block_size,
        ))

    return usages


def parse_df_inodes(text: str) -> List[InodeUsage]:
    """Analyse la sortie de 'df -iP' (colonnes IUsed/IFree ou iused/ifree)"""
    _, rows = _parse_df_table(text, 'df -i')

    usages = []
    for device, mount_point, fields in rows:
        if not device.startswith('/dev/'):
            continue
        if 'iused' not in fields or 'ifree' not in fields:
            raise ParseFailure('df -i', "colonnes d'inodes absentes")
        # Certains systèmes de fichiers (vfat, ...) affichent '-'
        if fields['iused'] == '-' or fields['ifree'] == '-':
            continue
        usages.append(InodeUsage(
            device=device,
            mount_point=mount_point,
            used=_to_int(fields['iused'], 'df -i'),
            free=_to_int(fields['ifree'], 'df -i'),
        ))

    return usages


# macOS

def parse_vm_stat(text: str) -> Tuple[int, Dict[str, int]]:
    """
    Analyse la sortie de vm_stat

    Seules les catégories de pages reconnues sont retournées ; une catégorie
    renommée par l'outil est donc absente du total.

    Returns:
        tuple: (taille de page en octets, {catégorie: nombre de pages})
    """
    page_size = DEFAULT_PAGE_SIZE
    match = re.search(r'page size of (\d+) bytes', text)
    if match:
        page_size = int(match.group(1))

    known = VM_STAT_FREE_CATEGORIES + VM_STAT_USED_CATEGORIES
    pages = {}
    for line in text.splitlines():
        match = re.match(r'^Pages (.+?):\s+(\d+)\.?\s*$', line.strip())
        if match and match.group(1).lower() in known:
            pages[match.group(1).lower()] = int(match.group(2))

    if not pages:
        raise ParseFailure('vm_stat', "aucune catégorie de pages reconnue")
    return page_size, pages


_UNIT_FACTORS_MB = {'K': 1.0 / 1024, 'M': 1.0, 'G': 1024.0, 'T': 1024.0 * 1024}


def parse_swapusage(text: str) -> Dict[str, float]:
    """
    Analyse 'sysctl -n vm.swapusage'

    Exemple: 'total = 2048.00M  used = 1037.25M  free = 1010.75M  (encrypted)'

    Returns:
        dict: total, used, free en MB
    """
    values = {}
    for name, number, unit in re.findall(r'(total|used|free)\s*=\s*([\d.]+)([KMGT]?)', text):
        values[name] = float(number) * _UNIT_FACTORS_MB.get(unit or 'M', 1.0)

    if set(values) != {'total', 'used', 'free'}:
        raise ParseFailure('vm.swapusage', text.strip())
    return values


def parse_top_cpu(text: str) -> Dict[str, float]:
    """
    Dernière ligne 'CPU usage:' de top (macOS)

    Exemple: 'CPU usage: 6.45% user, 9.67% sys, 83.87% idle'
    """
    lines = [line for line in text.splitlines() if line.strip().startswith('CPU usage:')]
    if not lines:
        raise ParseFailure('top', "ligne 'CPU usage' introuvable")

    values = dict(
        (name, float(number))
        for number, name in re.findall(r'([\d.]+)%\s+(user|sys|idle)', lines[-1])
    )
    if set(values) != {'user', 'sys', 'idle'}:
        raise ParseFailure('top', lines[-1].strip())
    return {'user': values['user'], 'system': values['sys'], 'idle': values['idle']}


def parse_sysctl_loadavg(text: str) -> Tuple[float, float, float]:
    """Analyse 'sysctl -n vm.loadavg' (ex: '{ 1.53 1.71 1.84 }')"""
    parts = text.strip().strip('{}').split()
    if len(parts) < 3:
        raise ParseFailure('vm.loadavg', text.strip())
    return (
        _to_float(parts[0], 'vm.loadavg'),
        _to_float(parts[1], 'vm.loadavg'),
        _to_float(parts[2], 'vm.loadavg'),
    )
