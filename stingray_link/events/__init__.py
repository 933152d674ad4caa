from .multicast import (
    Listener as Listener,
    Multicast as Multicast,
    OneShot as OneShot,
)
