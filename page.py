# page.py: the browser client, served as one HTML document from "/"

GAME_HTML = r"""<!doctype html><meta charset="utf-8"><title>ByteForge</title>
<meta name="viewport" content="width=device-width,initial-scale=1">
<style>
  :root{
    --bg:#000; --panel:#0b0b12; --panel2:#0f0f18; --muted:#b6b6c6; --border:#232334;
    --btn:#141625; --btnTxt:#e7e7f5; --violet:#7c3aed; --violet2:#a78bfa; --good:#22c55e; --red:#ef4444;
  }
  *{box-sizing:border-box} body{font-family:Inter,Arial;background:
     radial-gradient(800px 400px at 10% -10%, rgba(124,58,237,.25), transparent 60%),
     #000;color:#eee;margin:0;padding:18px}
  .wrap{max-width:760px;margin:0 auto;background:linear-gradient(180deg,var(--panel),var(--panel2));border:1px solid var(--border);padding:16px;border-radius:22px}
  .row{display:flex;justify-content:space-between;gap:12px;align-items:center;flex-wrap:wrap}
  .big{font-size:48px;font-weight:800;text-align:center;margin:14px 0}
  .muted{color:var(--muted)}
  .btn{display:inline-flex;align-items:center;gap:8px;padding:10px 14px;border-radius:12px;border:1px solid var(--border);background:var(--btn);color:var(--btnTxt);cursor:pointer;transition:transform .05s ease}
  .btn:active{transform:scale(.98)}
  .btn.orange{background:linear-gradient(90deg,#7c3aed,#ef4444);border-color:#7c3aed;font-size:20px;padding:16px 28px}
  .card{border:1px solid var(--border);border-radius:16px;padding:12px;margin-top:12px;background:#0c0c14}
  .pill{padding:6px 10px;border:1px solid var(--border);border-radius:999px;color:#cfcfe8;background:#11121c}
  .notification{position:fixed;right:18px;bottom:18px;padding:10px 14px;border-radius:12px;background:#1f3b28;border:1px solid #2c5a39}
  .notification.error{background:#3a1f1f;border-color:#4a2a2a}
</style>
<div class="wrap">
  <div class="row"><h2>ByteForge</h2><span class="pill" id="rateWrap"><span id="autoCollectionRateDisplay">0</span></span></div>
  <div class="big"><span id="bytesDisplay">0</span> bytes</div>
  <div class="row muted">
    <span>Earned: <b id="totalEarnedDisplay">0</b></span>
    <span>Spent: <b id="totalSpentDisplay">0</b></span>
  </div>
  <div style="text-align:center;margin:18px 0"><button class="btn orange" id="collectButton">Collect byte</button></div>

  <div class="card row">
    <span>Byte multiplier <b id="multiplierLevelDisplay">1.0x</b></span>
    <button class="btn" id="multiplierUpgradeBtn">Buy (<span id="multiplierCostDisplay">0</span>)</button>
  </div>
  <div class="card row">
    <span>Auto collector <b id="autoCollectorLevelDisplay">0</b></span>
    <button class="btn" id="autoCollectorUpgradeBtn">Buy (<span id="autoCollectorCostDisplay">0</span>)</button>
  </div>
  <div class="card row">
    <span>Byte generator <b id="byteGeneratorLevelDisplay">0</b></span>
    <button class="btn" id="byteGeneratorUpgradeBtn">Buy (<span id="byteGeneratorCostDisplay">0</span>)</button>
  </div>
</div>
<script>
const COSTS = {
  byteMultiplier: lvl => Math.floor(10 * Math.pow(1.5, lvl * 10)),
  autoCollector:  lvl => Math.floor(25 * Math.pow(2, lvl)),
  byteGenerator:  lvl => Math.floor(50 * Math.pow(3, lvl)),
};

class ByteForge {
  constructor(){
    this.userId = 'player-' + Math.random().toString(36).substr(2, 9);
    this.userData = null;
    this.state = 'uninitialized';
    this.timer = null;
    this.init();
  }

  async init(){
    this.state = 'loading';
    try {
      await this.loadUserData();
      this.bind();
      this.startAutoCollect();
      this.state = 'ready';
      this.render();
    } catch (e) {
      console.error('Failed to initialize ByteForge:', e);
    }
  }

  async api(path, body){
    const opts = body === undefined ? {cache:'no-store'} : {
      method:'POST', headers:{'Content-Type':'application/json'}, body: JSON.stringify(body)
    };
    const r = await fetch(`/api/user/${this.userId}${path}`, opts);
    return r.json();
  }

  async loadUserData(){
    const j = await this.api('');
    if (j.error) throw new Error(j.error);
    this.userData = j;
  }

  async addBytes(amount){
    const j = await this.api('/bytes/add', {amount});
    if (j.success){
      this.userData.bytes = j.newTotal;
      this.userData.totalBytesEarned += j.bytesAdded;
      this.render();
      this.notify(`+${j.bytesAdded} bytes! (${fmtLevel(j.multiplier)}x multiplier)`);
    }
    return j;
  }

  async removeBytes(amount){
    const j = await this.api('/bytes/remove', {amount});
    if (j.success){
      this.userData.bytes = j.newTotal;
      this.userData.totalBytesSpent += j.bytesRemoved;
      this.render();
      this.notify(`-${j.bytesRemoved} bytes spent`);
    } else if (j.error){
      this.notify(j.error, 'error');
    }
    return j;
  }

  async getBytesBalance(){
    const j = await this.api('/bytes');
    if (j.error) throw new Error(j.error);
    this.userData.bytes = j.bytes;
    this.userData.totalBytesEarned = j.totalEarned;
    this.userData.totalBytesSpent = j.totalSpent;
    this.render();
    return j;
  }

  async purchaseUpgrade(type, cost){
    const j = await this.api('/upgrade', {upgradeType:type, cost});
    if (j.success){
      this.userData.bytes = j.newTotal;
      this.userData.totalBytesSpent += j.bytesSpent;
      this.userData.upgrades[type] = j.newUpgradeLevel;
      this.render();
      this.notify(`Upgrade purchased: ${type} (Level ${fmtLevel(j.newUpgradeLevel)})`);
    } else if (j.error){
      this.notify(j.error, 'error');
    }
    return j;
  }

  buy(type){
    const cost = COSTS[type](this.userData.upgrades[type]);
    if (this.userData.bytes < cost){ this.notify('Not enough bytes!', 'error'); return; }
    this.purchaseUpgrade(type, cost);
  }

  bind(){
    const on = (id, fn) => { const el = document.getElementById(id); if (el) el.addEventListener('click', fn); };
    on('collectButton', () => this.addBytes(1));
    on('multiplierUpgradeBtn', () => this.buy('byteMultiplier'));
    on('autoCollectorUpgradeBtn', () => this.buy('autoCollector'));
    on('byteGeneratorUpgradeBtn', () => this.buy('byteGenerator'));
  }

  passiveYield(){
    const u = this.userData.upgrades;
    return Math.floor(u.autoCollector * 0.1 + u.byteGenerator * 0.5);
  }

  startAutoCollect(){
    if (this.timer) clearInterval(this.timer);
    this.timer = setInterval(() => {
      if (!this.userData) return;
      const n = this.passiveYield();
      if (n > 0) this.addBytes(n);
    }, 1000);
  }

  render(){
    if (!this.userData) return;
    const u = this.userData, up = u.upgrades;
    const set = (id, v) => { const el = document.getElementById(id); if (el) el.textContent = v; };
    set('bytesDisplay', fmt(u.bytes));
    set('totalEarnedDisplay', fmt(u.totalBytesEarned));
    set('totalSpentDisplay', fmt(u.totalBytesSpent));
    set('multiplierLevelDisplay', up.byteMultiplier.toFixed(1) + 'x');
    set('autoCollectorLevelDisplay', up.autoCollector);
    set('byteGeneratorLevelDisplay', up.byteGenerator);
    set('multiplierCostDisplay', fmt(COSTS.byteMultiplier(up.byteMultiplier)));
    set('autoCollectorCostDisplay', fmt(COSTS.autoCollector(up.autoCollector)));
    set('byteGeneratorCostDisplay', fmt(COSTS.byteGenerator(up.byteGenerator)));
    set('autoCollectionRateDisplay', fmt(up.autoCollector * 0.1 + up.byteGenerator * 0.5) + '/s');
  }

  notify(msg, type='info'){
    const n = document.createElement('div');
    n.className = `notification ${type}`;
    n.textContent = msg;
    document.body.appendChild(n);
    setTimeout(() => n.remove(), 3000);
  }

  getUserId(){ return this.userId; }
  getUserData(){ return this.userData; }
  isReady(){ return this.state === 'ready'; }
}

function fmt(n){
  if (n >= 1e9) return (n / 1e9).toFixed(1) + 'B';
  if (n >= 1e6) return (n / 1e6).toFixed(1) + 'M';
  if (n >= 1e3) return (n / 1e3).toFixed(1) + 'K';
  return String(Math.round(n * 10) / 10);
}
function fmtLevel(v){ return Number.isInteger(v) ? v : v.toFixed(1); }

document.addEventListener('DOMContentLoaded', () => { window.byteForge = new ByteForge(); });
</script>
"""
