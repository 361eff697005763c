"""
Collecteur de métriques spécifique Linux

Ce module utilise les interfaces Linux :
- Pseudo-fichiers /proc/stat, /proc/loadavg et /proc/diskstats
- Commandes free, df et mount
"""

from typing import Dict

from ..base import BaseProbe, Sample
from ..parsers import (
    LINUX_CPU_CATEGORIES,
    DiskReading,
    cpu_percentages,
    device_name,
    io_utilization_percent,
    kb_to_mb,
    parse_df_capacity,
    parse_df_inodes,
    parse_diskstats,
    parse_free,
    parse_loadavg,
    parse_mount,
    parse_proc_stat_cpu,
)


PROC_STAT = '/proc/stat'
PROC_LOADAVG = '/proc/loadavg'
PROC_DISKSTATS = '/proc/diskstats'

CPU_VALUES_KEY = 'cpu_values'
DISK_STATS_KEY = 'disk_stats_{}'


class LinuxProbe(BaseProbe):
    """
    Collecteur de métriques pour Linux

    La répartition CPU et l'occupation des disques sont calculées à partir de
    deux lectures successives conservées dans le DeltaStore ; elles ne sont
    donc émises qu'à partir du second cycle.
    """

    def _load_cpu(self) -> Sample:
        sample: Sample = {}
        self._partial('cpu', sample, self._cpu_breakdown)
        self._partial('loadavg', sample, lambda: self._load_sample(parse_loadavg(self.runner.read(PROC_LOADAVG))))
        return sample

    def _cpu_breakdown(self) -> Sample:
        """
        Répartition CPU (user, nice, system, idle, iowait) et taux d'utilisation

        Returns:
            dict: Pourcentages par catégorie, vide au premier cycle
        """
        current = parse_proc_stat_cpu(self.runner.read(PROC_STAT))
        self.store.store(CPU_VALUES_KEY, current)

        previous = self.store.retrieve(CPU_VALUES_KEY)
        if previous is None:
            self.logger.debug("Première lecture CPU, répartition disponible au prochain cycle")
            return {}

        percentages = cpu_percentages(previous, current, LINUX_CPU_CATEGORIES)
        if percentages is None:
            self.logger.debug("Aucun tick CPU écoulé depuis le cycle précédent")
            return {}

        sample = {f"cpu.{category}": value for category, value in percentages.items()}
        # Uniquement à partir des deltas : au premier cycle les compteurs
        # cumulés depuis le démarrage n'ont pas de sens
        sample['cpu.in_use'] = 100 - percentages['idle']
        return sample

    def _load_memory(self) -> Sample:
        rows = parse_free(self.runner.run(['free', '-k']))

        memory = rows['Mem']
        sample = self._memory_sample(
            'memory',
            kb_to_mb(memory['total']),
            kb_to_mb(memory['used']),
            kb_to_mb(memory['free'])
        )

        swap = rows.get('Swap')
        if swap is not None:
            sample.update(self._memory_sample(
                'swap',
                kb_to_mb(swap['total']),
                kb_to_mb(swap['used']),
                kb_to_mb(swap['free'])
            ))

        return sample

    def _load_disks(self) -> Sample:
        sample: Sample = {}
        self._partial('df', sample, lambda: self._disk_capacity_sample(
            parse_df_capacity(self.runner.run(['df', '-kP']))
        ))
        self._partial('diskstats', sample, self._disk_io_sample)
        return sample

    def _disk_io_sample(self) -> Sample:
        """
        Taux d'occupation (percent_utilization) des périphériques montés

        Returns:
            dict: Occupation par disque, vide au premier cycle
        """
        mounts = parse_mount(self.runner.run(['mount']))
        stats = parse_diskstats(self.runner.read(PROC_DISKSTATS))
        now = self.clock()

        sample: Sample = {}
        for device, mount_point in mounts.items():
            if not device.startswith('/dev/'):
                continue

            name = device_name(device)
            if name not in stats:
                continue

            reading = DiskReading(timestamp=now, device=name, utilization=stats[name])
            key = DISK_STATS_KEY.format(name)
            self.store.store(key, reading)

            previous = self.store.retrieve(key)
            if previous is None:
                continue

            utilization = io_utilization_percent(previous, reading)
            if utilization is not None:
                self._emit_device(sample, 'disk', device, mount_point,
                                  {'percent_utilization': utilization})

        return sample

    def _load_filesystem(self) -> Sample:
        return self._inode_sample(parse_df_inodes(self.runner.run(['df', '-iP'])))

    def get_sources(self) -> Dict[str, str]:
        """Sources utilisées par groupe de métriques (pour le diagnostic)"""
        return {
            'cpu': f"{PROC_STAT}, {PROC_LOADAVG}",
            'memory': 'free -k',
            'disks': f"df -kP, mount, {PROC_DISKSTATS}",
            'filesystem': 'df -iP',
        }
