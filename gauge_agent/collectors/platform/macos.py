"""
Collecteur de métriques spécifique macOS

Ce module utilise les outils macOS :
- top pour la répartition CPU
- sysctl pour la charge moyenne et le swap
- vm_stat pour la mémoire
- df pour les disques et les inodes
"""

from typing import Dict

from ..base import BaseProbe, Sample
from ..parsers import (
    VM_STAT_FREE_CATEGORIES,
    VM_STAT_USED_CATEGORIES,
    bytes_to_mb,
    parse_df_capacity,
    parse_df_inodes,
    parse_swapusage,
    parse_sysctl_loadavg,
    parse_top_cpu,
    parse_vm_stat,
)


# Deux échantillons à une seconde d'intervalle : le premier échantillon de
# top est calculé depuis le démarrage, seul le second reflète l'activité récente
TOP_COMMAND = ['top', '-l', '2', '-n', '0', '-s', '1']


class MacOSProbe(BaseProbe):
    """
    Collecteur de métriques pour macOS

    top calcule lui-même la répartition CPU entre ses deux échantillons ;
    aucun compteur brut n'est donc conservé dans le DeltaStore.
    """

    def _load_cpu(self) -> Sample:
        sample: Sample = {}
        self._partial('top', sample, self._cpu_breakdown)
        self._partial('vm.loadavg', sample, lambda: self._load_sample(
            parse_sysctl_loadavg(self.runner.run(['sysctl', '-n', 'vm.loadavg']))
        ))
        return sample

    def _cpu_breakdown(self) -> Sample:
        percentages = parse_top_cpu(self.runner.run(TOP_COMMAND))
        sample = {f"cpu.{category}": value for category, value in percentages.items()}
        sample['cpu.in_use'] = 100 - percentages['idle']
        return sample

    def _load_memory(self) -> Sample:
        sample: Sample = {}
        self._partial('vm_stat', sample, self._vm_stat_sample)
        self._partial('vm.swapusage', sample, self._swap_sample)
        return sample

    def _vm_stat_sample(self) -> Sample:
        """
        Mémoire physique depuis vm_stat

        Le total est la somme des seules catégories reconnues : si vm_stat
        renomme ou omet une catégorie, le total est sous-estimé.
        """
        page_size, pages = parse_vm_stat(self.runner.run(['vm_stat']))

        free_pages = sum(pages.get(category, 0) for category in VM_STAT_FREE_CATEGORIES)
        used_pages = sum(pages.get(category, 0) for category in VM_STAT_USED_CATEGORIES)

        return self._memory_sample(
            'memory',
            bytes_to_mb((free_pages + used_pages) * page_size),
            bytes_to_mb(used_pages * page_size),
            bytes_to_mb(free_pages * page_size)
        )

    def _swap_sample(self) -> Sample:
        swap = parse_swapusage(self.runner.run(['sysctl', '-n', 'vm.swapusage']))
        return self._memory_sample('swap', swap['total'], swap['used'], swap['free'])

    def _load_disks(self) -> Sample:
        return self._disk_capacity_sample(parse_df_capacity(self.runner.run(['df', '-kP'])))

    def _load_filesystem(self) -> Sample:
        return self._inode_sample(parse_df_inodes(self.runner.run(['df', '-ik'])))

    def get_sources(self) -> Dict[str, str]:
        """Sources utilisées par groupe de métriques (pour le diagnostic)"""
        return {
            'cpu': f"{' '.join(TOP_COMMAND)}, sysctl vm.loadavg",
            'memory': 'vm_stat, sysctl vm.swapusage',
            'disks': 'df -kP',
            'filesystem': 'df -ik',
        }
