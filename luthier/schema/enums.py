from enum import Enum


class BodyWood(str, Enum):
    mahogany = "Mahogany"
    ash = "Swamp Ash"
    alder = "Alder"
    maple = "Maple"
    basswood = "Basswood"
    koa = "Koa"


class NeckProfile(str, Enum):
    modern_c = "Modern C"
    vintage_50s = "50s Vintage U"
    slim_taper = "Slim Taper D"
    wizard = "Super Thin (Wizard)"


class FretboardMaterial(str, Enum):
    rosewood = "Rosewood"
    maple = "Maple"
    ebony = "Ebony"
    pau_ferro = "Pau Ferro"


class BridgeSystem(str, Enum):
    tune_o_matic = "Tune-o-matic (Fixed)"
    hardtail = "Hardtail (String-thru)"
    synchronized_tremolo = "Synchronized Tremolo (Vintage)"
    floyd_rose = "Floyd Rose (Double Locking)"
    evertune = "Evertune (Spring Tension)"


class PickupConfig(str, Enum):
    sss = "SSS (3 Single Coils)"
    hss = "HSS (Humbucker Bridge)"
    hh = "HH (Dual Humbuckers)"
    p90 = "Dual P-90s"


class ChatRole(str, Enum):
    user = "user"
    model = "model"


class WorkbenchTab(str, Enum):
    configurator = "configurator"
    advisory = "advisory"
